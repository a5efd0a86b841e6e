#!/usr/bin/env python3
"""
List the models visible to GOOGLE_API_KEY.

Usage:
    python scripts/list_models.py
"""

import os
import sys

from dotenv import load_dotenv
from google import genai


def main():
    load_dotenv()
    api_key = os.environ.get("GOOGLE_API_KEY")
    if not api_key:
        print("GOOGLE_API_KEY not found in environment or .env file", file=sys.stderr)
        sys.exit(1)

    try:
        client = genai.Client(api_key=api_key)
        print("Fetching available models...\n")
        print("Available models:")
        print("================\n")
        for model in client.models.list():
            actions = getattr(model, "supported_actions", None) or []
            print(f"Name: {model.name}")
            print(f"Display Name: {model.display_name or 'N/A'}")
            print(f"Supported methods: {', '.join(actions) or 'N/A'}")
            print("---")
    except Exception as e:
        print(f"Error listing models: {e}", file=sys.stderr)


if __name__ == "__main__":
    main()
