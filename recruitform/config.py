import os
import logging
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from a .env file if it exists
load_dotenv()

logger = logging.getLogger(__name__)

# Constants for model names
MODEL_NAME_SMALL = "mistral-small-latest"

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_DATA_DIR = PACKAGE_DIR / "data"
DEFAULT_PUBLIC_BASE_URL = "http://localhost:8000/files"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


@dataclass
class LLMConfig:
    """
    Manages configuration for the LLM services, loading from environment variables.
    """

    MISTRAL_API_KEY: str
    MODEL_NAME_EVAL: str  # Model for resume structuring and scoring
    MAX_RETRIES: int = 1  # a single attempt per call


@dataclass
class StorageConfig:
    """
    Where submissions, forms and uploaded resumes live on disk.
    """

    DATA_DIR: Path
    BLOB_DIR: Path
    PUBLIC_BASE_URL: str
    MAX_CONCURRENCY: int = 5


def get_llm_config() -> LLMConfig:
    """
    Initializes and validates the LLM configuration.
    Raises:
        KeyError: If the MISTRAL_API_KEY is not found in the environment.
    """
    try:
        api_key = os.environ["MISTRAL_API_KEY"]
    except KeyError:
        logger.error("FATAL: MISTRAL_API_KEY environment variable not set.")
        raise

    return LLMConfig(
        MISTRAL_API_KEY=api_key,
        MODEL_NAME_EVAL=os.getenv("MISTRAL_MODEL", MODEL_NAME_SMALL),
    )


def get_storage_config() -> StorageConfig:
    data_dir = Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR)))
    blob_dir = Path(os.getenv("BLOB_DIR", str(data_dir / "blobs")))
    try:
        max_concurrency = int(os.getenv("MAX_CONCURRENCY", "5"))
    except ValueError:
        logger.warning("Invalid MAX_CONCURRENCY; falling back to 5.")
        max_concurrency = 5

    return StorageConfig(
        DATA_DIR=data_dir,
        BLOB_DIR=blob_dir,
        PUBLIC_BASE_URL=os.getenv("PUBLIC_BASE_URL", DEFAULT_PUBLIC_BASE_URL).rstrip("/"),
        MAX_CONCURRENCY=max(1, max_concurrency),
    )
