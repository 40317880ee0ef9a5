from taxtoken.app import app, PORT
from taxtoken.util.log import log_info, log_warn


if __name__ == "__main__":
    log_warn("[HTTP] Unsigned requests act as the owner wallet; do not expose this port publicly")
    log_info(f"[HTTP] Flask server starting on port {PORT}")
    app.run(port=PORT)
