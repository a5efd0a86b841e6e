#!/usr/bin/env python3
"""
Check that GOOGLE_API_KEY can open a Gemini Live session.

Usage:
    python scripts/check_connection.py
    python scripts/check_connection.py --model gemini-live-2.5-flash-preview

Exits 0 once the session opens, 1 on a missing key or any failure.
"""

import asyncio
import os
import sys

from dotenv import load_dotenv
from google import genai
from google.genai import types

DEFAULT_MODEL = "gemini-live-2.5-flash-preview"


async def check_connection(api_key: str, model: str) -> bool:
    client = genai.Client(api_key=api_key)
    config = types.LiveConnectConfig(response_modalities=[types.Modality.AUDIO])
    try:
        async with client.aio.live.connect(model=model, config=config):
            print("Successfully connected to Gemini Live API!")
            print("Your setup is working correctly")
        return True
    except Exception as e:
        print(f"Failed to connect: {e}", file=sys.stderr)
        if "api key" in str(e).lower():
            print("   Check that your API key is valid and has access to Gemini Live API", file=sys.stderr)
        return False


def main():
    import argparse
    parser = argparse.ArgumentParser(description="Smoke-test the Gemini Live API connection")
    parser.add_argument("--model", default=DEFAULT_MODEL, help="Live model to connect with")
    args = parser.parse_args()

    load_dotenv()
    api_key = os.environ.get("GOOGLE_API_KEY")
    if not api_key:
        print("GOOGLE_API_KEY not found in environment or .env file", file=sys.stderr)
        sys.exit(1)

    print("API key found")
    print(f"Testing Gemini Live API connection with model {args.model}...")
    ok = asyncio.run(check_connection(api_key, args.model))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
