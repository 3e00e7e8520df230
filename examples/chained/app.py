"""Chained route registration — several methods on one path.

Run:
    python app.py
"""

from perch import App

app = App()

app.route("/book").get(lambda: "Get a random book").post(lambda: "Add a book").put(
    lambda: "Update the book"
)


if __name__ == "__main__":
    app.run()
