import os

import uvicorn
from dotenv import load_dotenv

if __name__ == "__main__":
    load_dotenv()
    host = os.environ.get("RELAY_HOST", "localhost")
    port = int(os.environ.get("PORT", "8000"))
    reload = os.environ.get("RELAY_RELOAD", "").lower() in ("1", "true", "yes")
    uvicorn.run(
        "interview_relay.server:app",
        host=host,
        port=port,
        reload=reload,
        reload_dirs=["interview_relay", "frontend"] if reload else None,
    )
