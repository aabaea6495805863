# run.py
"""
run.py
Development entry point: initialises the database and serves the JSON API
with Flask's built-in server. Use a WSGI server with
bto.app_factory:create_app() for anything else.
"""
from bto.app_factory import create_app
from bto.config import get_settings
from bto.logger import get_logger

logger = get_logger("bto.run")


def main():
    # 0. settings (DATABASE_URL, SEED_DATA_DIR, HOST, PORT ...)
    settings = get_settings()

    # 1. app, with tables created and users seeded on first start
    app = create_app(settings)
    logger.info(f"routes: {sorted(rule.rule for rule in app.url_map.iter_rules())}")

    # 2. serve
    app.run(host=settings.host, port=settings.port, debug=False, use_reloader=False)


if __name__ == "__main__":
    main()
