"""Hello World -- the simplest quire example.

A template body is Python: it writes output with ``emit``. No templates
directory needed.

Run:
    python app.py
"""

from quire import DictLoader, Environment

env = Environment(loader=DictLoader({"greeting": 'emit("Hello, ", name, "!")'}))

# Every get_template() call returns a fresh, single-use Template
template = env.get_template("greeting")

output = template.render(name="World")


def main() -> None:
    print(output)
    print()

    for name in ["Quire", "Blocks", "Python"]:
        print(env.render("greeting", name=name))


if __name__ == "__main__":
    main()
