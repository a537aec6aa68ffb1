#setup: pip install -e ".[test]"
#setup: python -m finmodel          # serves the API on FINMODEL_PORT (default 5000)

from finmodel.app import create_app
from finmodel.config import configure_logging, load_config

if __name__ == "__main__":
    config = load_config()
    configure_logging(config)
    create_app(config).run(port=config.port, debug=True)
