from dotenv import load_dotenv
import os

# Project root .env; values already in the environment win
ENV_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), ".env")


def load_env(path: str = ENV_PATH) -> bool:
    return load_dotenv(path, override=False)
