"""DictLoader -- in-memory templates without filesystem.

Templates from a dictionary. No templates directory needed. Shows block
filters: a trimmed summary captured out of the page flow, and a shouted
block whose filter reaches every enclosing block too.

Run:
    python app.py
"""

from quire import DictLoader, Environment

templates = {
    "layout": """\
emit("<html><head><title>", blocks["title"], "</title>")
if "summary" in blocks:
    emit('<meta name="description" content="', blocks["summary"], '">')
emit("</head><body>")
emit("<nav>")
for item in shared.nav_items:
    emit('<a href="', item["url"], '">', item["label"], "</a>")
emit("</nav>")
emit("<main>", blocks["content"], "</main>")
emit("</body></html>")
""",
    "post": """\
extend("layout")
block("title", title.upper())

with capture("summary", filter=str.strip, silent=True):
    emit("   ", summary, "   ")

emit("<h1>", heading, "</h1>")
for tag in tags:
    emit("<span>", tag, "</span>")

block("shout")
emit("<p>", message, "</p>")
endblock_recursive(str.upper)
""",
}

env = Environment(
    loader=DictLoader(templates),
    globals={
        "nav_items": [
            {"url": "/", "label": "Home"},
            {"url": "/about", "label": "About"},
        ],
    },
)

output = env.render(
    "post",
    title="DictLoader Demo",
    summary="Templates loaded from a dict.",
    heading="In-Memory Templates",
    tags=["memory", "blocks"],
    message="No filesystem required",
)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
