# app.py
from typing import Optional

from dotenv import load_dotenv

# .env musi być wczytany zanim Config przeczyta os.environ;
# .env.local uzupełnia tylko brakujące wartości
load_dotenv()
load_dotenv(dotenv_path=".env.local", override=False)

from flask import Flask  # noqa: E402

from euvat.application.rate_catalog import RateCatalog  # noqa: E402
from euvat.application.vat_number_service import VatNumberService  # noqa: E402
from euvat.core.config import Config  # noqa: E402
from euvat.core.logging_config import configure_logging  # noqa: E402
from euvat.integration.rates_feed_adapter import RatesFeedAdapter  # noqa: E402
from euvat.interface.api import api_bp  # noqa: E402


def create_app(
    catalog: Optional[RateCatalog] = None,
    numbers: Optional[VatNumberService] = None,
) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)

    configure_logging(app)

    # jeden katalog na proces – współdzielony przez wszystkie requesty
    app.extensions["euvat"] = {
        "catalog": catalog or RateCatalog(RatesFeedAdapter()),
        "numbers": numbers or VatNumberService(),
    }

    app.register_blueprint(api_bp)

    return app


def main() -> None:
    app = create_app()
    app.run(debug=True)


if __name__ == "__main__":
    main()
