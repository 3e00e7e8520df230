"""Route parameters — named segments, compound segments, and custom patterns.

Run:
    python app.py
"""

from perch import App, Request

app = App()


@app.get("/users/:userId/books/:bookId")
def user_book(request: Request):
    return dict(request.params)


@app.get("/flights/:from-:to")
def flight(request: Request):
    # "from" is a keyword, so read it from the params dict
    return dict(request.params)


@app.get("/plantae/:genus.:species")
def plant(genus: str, species: str):
    return {"genus": genus, "species": species}


@app.get(r"/user/:userId(\d+)")
def user(userId: int):
    return {"userId": userId, "next": userId + 1}


if __name__ == "__main__":
    app.run()
