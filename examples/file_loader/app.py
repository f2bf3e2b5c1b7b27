"""File-based templates -- the most common real-world pattern.

Loads templates from disk with FileSystemLoader and demonstrates template
inheritance: a page extends a layout, and a middle layout wraps the page's
content before handing it to the base layout.

Run:
    python app.py
"""

from pathlib import Path

from quire import Environment, FileSystemLoader

templates_dir = Path(__file__).parent / "templates"
env = Environment(
    loader=FileSystemLoader(str(templates_dir)),
    globals={
        "site_name": "My Site",
        "nav_items": [
            {"url": "/", "label": "Home"},
            {"url": "/about", "label": "About"},
        ],
    },
)

home_output = env.render(
    "home.tpl",
    title="Welcome",
    message="This is a quire-powered site with template inheritance.",
)

about_output = env.render(
    "about.tpl",
    title="About Us",
    description="Blocks flow from the page through every layout it extends.",
)


def main() -> None:
    print("=== Home Page ===")
    print(home_output)
    print()
    print("=== About Page ===")
    print(about_output)


if __name__ == "__main__":
    main()
