import uvicorn

from notification_limiter.core.app_factory import create_app

app = create_app()


if __name__ == "__main__":
    uvicorn.run("notification_limiter.main:app", host="0.0.0.0", port=8000)
