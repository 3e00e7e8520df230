"""Hello World — the simplest perch app.

Run:
    python app.py
"""

from perch import App

app = App()


@app.get("/")
def index():
    return "Hello World!"


if __name__ == "__main__":
    app.run()
