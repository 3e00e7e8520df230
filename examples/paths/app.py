"""Route paths — literal strings, patterns, and regular expressions.

Routes are tried in registration order, so ``/dragonfly`` is answered
by the ``/a/`` regex before ``.*fly$`` ever sees it.

Run:
    python app.py
"""

import re

from perch import App

app = App()

app.get("/", lambda: "root")
app.get("/about", lambda: "about")
app.get("/random.text", lambda: "random.text")

# b is optional
app.get("/ab?cd", lambda: "ab?cd")

# one or more b
app.get("/ab+cd", lambda: "ab+cd")

# anything between ab and cd
app.get("/ab*cd", lambda: "ab*cd")

# cd is optional
app.get("/ab(cd)?e", lambda: "ab(cd)?e")

# any path containing an "a"
app.get(re.compile(r"a"), lambda: "/a/")

# butterfly and dragonfly, but not butterflyman
app.get(re.compile(r".*fly$"), lambda: "/.*fly$/")


if __name__ == "__main__":
    app.run()
