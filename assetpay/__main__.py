"""Run the API with uvicorn: python -m assetpay"""

import uvicorn

from assetpay.config.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("assetpay.api.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
