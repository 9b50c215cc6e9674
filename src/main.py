"""Main application entry point.

Serves the chat proxy API and the NiceGUI chat page, either from one server
or as two processes. Environment variables are loaded from .env file.
"""

import logging
import os
import subprocess
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
UI_PORT = int(os.getenv("UI_PORT", "8080"))


def run_integrated() -> None:
    """Mount the chat page on the API app and serve both from PORT."""
    import uvicorn
    from nicegui import ui

    from src.api.app import create_app
    from src.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    app = create_app()
    ui.run_with(
        app,
        title="LLM Chat",
        favicon="💬",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "llm-chat-secret"),
    )

    logger.info(f"Chat UI and API on http://localhost:{PORT}/ (docs at /docs)")
    uvicorn.run(app, host=HOST, port=PORT, log_level=os.getenv("LOG_LEVEL", "info").lower())


def run_separate() -> None:
    """Run the API (PORT) and the chat page (UI_PORT) as two processes.

    The page reaches the API through API_BASE_URL.
    """
    logger.info(f"Starting API on http://localhost:{PORT}")
    logger.info(f"Starting chat UI on http://localhost:{UI_PORT}")

    env = {**os.environ, "API_BASE_URL": os.getenv("API_BASE_URL", f"http://localhost:{PORT}")}
    api_proc = subprocess.Popen(
        [sys.executable, "-m", "uvicorn", "src.api.app:app", "--host", HOST, "--port", str(PORT)],
        env=env,
    )
    ui_proc = subprocess.Popen(
        [sys.executable, "-c", "from src.ui.chat_page import main; main()"],
        env=env,
    )

    try:
        while api_proc.poll() is None and ui_proc.poll() is None:
            try:
                api_proc.wait(timeout=1)
            except subprocess.TimeoutExpired:
                continue
    except KeyboardInterrupt:
        logger.info("Shutting down servers...")
    finally:
        for proc in (api_proc, ui_proc):
            proc.terminate()
            proc.wait()


def main() -> None:
    """Application entry point.

    Set RUN_MODE=separate to run the API and the UI on different ports.
    Default is integrated mode (both on PORT).
    """
    mode = os.getenv("RUN_MODE", "integrated").lower()
    logger.info(f"Starting LLM Chat in {mode} mode")

    if mode == "separate":
        run_separate()
    else:
        run_integrated()


if __name__ == "__main__":
    main()
