"""Route handlers — one handler, several, lists of them, and a mix.

Every handler but the last returns ``CONTINUE`` to pass the request on.

Run:
    python app.py
"""

import logging

from perch import CONTINUE, App

logger = logging.getLogger("example.handlers")

app = App()


@app.get("/example/a")
def example_a():
    return "Hello from A!"


def log_next(request):
    logger.info("the response will be sent by the next function ...")
    return CONTINUE


def example_b():
    return "Hello from B!"


app.get("/example/b", log_next, example_b)


def cb0():
    logger.info("CB0")
    return CONTINUE


def cb1():
    logger.info("CB1")
    return CONTINUE


def cb2():
    return "Hello from C!"


app.get("/example/c", [cb0, cb1, cb2])


def example_d():
    logger.info("the response will be sent by the next function ...")
    return CONTINUE


def finish_d():
    return "Hello from D!"


app.get("/example/d", [cb0, cb1], example_d, finish_d)


if __name__ == "__main__":
    app.run()
