"""
Run FastAPI backend server
"""
import logging
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from classify.api import create_app
from classify.config import load_config

# Load .env from project root
load_dotenv(Path(__file__).parent / ".env")

if __name__ == "__main__":
    config = load_config()

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger = logging.getLogger("classify")

    for warning in config.validate():
        logger.warning(warning)

    uvicorn.run(create_app(config), host=config.api.host, port=config.api.port)
