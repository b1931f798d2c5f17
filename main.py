# ------------------------------------------------------------------------------
# Main Script for the Field Journal API and the background purge sweeper
# main.py
# ------------------------------------------------------------------------------
import atexit
import json
import os

from config import get_config, masked_config
config = get_config()
from logging_config import get_logger
logger = get_logger(__name__)

# --------------------------------------------------------------------------
# Configuration Parameters
# --------------------------------------------------------------------------
# use the configuration values from the config dictionary.
_debug = config["DEBUG_MODE"]
output_dir = config["OUTPUT_DIR"]

logger.info(f"Debug mode is {'enabled' if _debug else 'disabled'}.")
logger.info(f"Configuration: {json.dumps(masked_config(config), indent=2)}")

if not config["ANTHROPIC_API_KEY"]:
    raise RuntimeError("ANTHROPIC_API_KEY must be set")

os.makedirs(output_dir, exist_ok=True)

# -----------------------------
# Build the Web Interface
# -----------------------------
from web.web_interface import create_web_interface

# Expose the Flask server as the WSGI app.
interface = create_web_interface()
app = interface["server"]

# -----------------------------
# Start the Purge Sweeper
# -----------------------------
sweeper = interface["components"].sweeper
sweeper.start(interval=config["PURGE_INTERVAL_SECONDS"])

# Register the cleanup function
atexit.register(sweeper.stop)

if __name__ == '__main__':
    # Run the web interface
    try:
        interface["run"](debug=_debug)
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt received. Shutting down purge sweeper...")
        sweeper.stop()
