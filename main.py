import logging

from plant_monitor.app_factory import create_app
from plant_monitor.core.config import get_settings

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()
