"""Mounted routers — a self-contained birds router under ``/birds``.

The birds router has its own middleware and knows nothing about the
prefix it is mounted at.

Run:
    python app.py
"""

import logging
import time

from perch import CONTINUE, App, Request, Router

logger = logging.getLogger("example.birds")

birds = Router(name="birds")


def log_time(request: Request):
    logger.info("Time: %d (%s)", int(time.time() * 1000), request.original_path)
    return CONTINUE


birds.use(log_time)


@birds.get("/")
def birds_home():
    return "Birds home page"


@birds.get("/about")
def about(request: Request):
    return f"About birds (seen as {request.path} under {request.base_path})"


app = App()


@app.get("/")
def index():
    return "Hello World!"


app.use("/birds", birds)


if __name__ == "__main__":
    app.run()
