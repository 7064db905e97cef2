"""
ordered tables of named transform stages

A stage is a plain function taking the render context and the working text
and returning the new text. Stages register themselves by name with the
`stage` decorator and gamuts refer to them by that name.

    >>> gamut = Gamut(do_lists=40, do_headers=10)
    >>> gamut.names
    ['do_headers', 'do_lists']

"""

__all__ = ["stages", "stage", "Gamut"]

stages = {}


def stage(handler):
    """register `handler` as a stage under its own name"""
    stages[handler.__name__] = handler
    return handler


class Gamut:

    """a priority-ordered sequence of stages"""

    def __init__(self, **priorities):
        self.priorities = priorities
        self.names = sorted(priorities, key=priorities.get)

    def __iter__(self):
        return iter(self.names)

    def __repr__(self):
        order = ", ".join(f"{name}={self.priorities[name]}"
                          for name in self.names)
        return f"Gamut({order})"

    def run(self, ctx, text):
        """run each stage over `text` in ascending priority order"""
        for name in self.names:
            try:
                handler = stages[name]
            except KeyError:
                raise LookupError(f"no stage named `{name}`")
            text = handler(ctx, text)
        return text
