import uvicorn

from portfolio_api.core.config import settings


def main():
    uvicorn.run(
        "portfolio_api.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.is_local,
    )


if __name__ == "__main__":
    main()
