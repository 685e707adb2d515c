"""Entry point to run the VetCare FastAPI backend."""

import os
from pathlib import Path

# Load .env file FIRST so settings pick it up
from dotenv import load_dotenv
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)

import uvicorn


def main():
    uvicorn.run(
        "vetcare.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("APP_ENV", "development") == "development",
    )


if __name__ == "__main__":
    main()
