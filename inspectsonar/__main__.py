import os

from dotenv import load_dotenv

from inspectsonar.cli.commands import app

# Load .env file from ~/.inspectsonar/ if it exists
# Precedence: existing env vars > .env file (override=False)
load_dotenv(os.path.expanduser("~/.inspectsonar/.env"), override=False)

if __name__ == "__main__":
    app()
