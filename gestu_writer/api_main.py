import logging

from dotenv import load_dotenv

load_dotenv()

from gestu_writer.api.app import app  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

__all__ = ["app"]
