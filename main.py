"""Launch the shelter addressing FastAPI server."""

import logging

import uvicorn


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )
    uvicorn.run("shelter_addressing.server:app", host="0.0.0.0", port=8000, reload=True)


if __name__ == "__main__":
    main()
