"""Hello — continents and a greeting, handed from server to browser.

Demonstrates template rendering with kida, static assets registered as
one route per file, a nested JSON API with a payload route, and a
custom not-found handler.

Run:
    python app.py
"""

import json
from pathlib import Path

from wren import App, AppConfig, Request, Router, StaticAssets, Template

HERE = Path(__file__).parent

CONTINENTS = [
    "Africa",
    "Antarctica",
    "Asia",
    "Australia",
    "Europe",
    "North America",
    "South America",
]


def greeting() -> str:
    return "Server says hello to Client!"


app = App(
    AppConfig(template_dir=HERE / "templates", port=5000),
    static=StaticAssets(HERE / "static"),
)


@app.template_filter()
def to_json(value: object) -> str:
    return json.dumps(value)


@app.get("/")
def index():
    return Template("index.html", continents=CONTINENTS, greeting=greeting())


api = Router()


@api.get("/continents")
def list_continents():
    return CONTINENTS


@api.get("/continents/:index")
def show_continent(index: int):
    if not isinstance(index, int) or not 0 <= index < len(CONTINENTS):
        return {"error": f"No continent {index}"}, 404
    return {"index": index, "name": CONTINENTS[index]}


@api.post("/echo", max_body_size=1024)
def echo(body):
    return {"echo": body}, 201


app.nest("/api", api)


@app.not_found
def not_found(request: Request):
    return f"Nothing at {request.path}"


if __name__ == "__main__":
    app.run()
