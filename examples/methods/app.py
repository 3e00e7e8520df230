"""Route methods — GET, POST, and a route that answers every method.

Run:
    python app.py
"""

import logging

from perch import CONTINUE, App

logger = logging.getLogger("example.methods")

app = App()


@app.get("/")
def home():
    return "GET request to the homepage"


@app.post("/")
def create():
    return "POST request to the homepage"


def announce(request):
    logger.info("Accessing the secret section ...")
    return CONTINUE


def secret(request):
    return f"{request.method} request to the secret section"


app.all("/secret", announce, secret)


if __name__ == "__main__":
    app.run()
