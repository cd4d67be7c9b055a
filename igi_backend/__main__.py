import uvicorn

from igi_backend.config import settings


def main():
    uvicorn.run("igi_backend.main:app", host="0.0.0.0", port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    main()
