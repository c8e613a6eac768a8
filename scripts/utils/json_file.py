import json
import os


def load(filename):
    # loads the json content of a file
    # (error will be raised if file doesn't exist)

    with open(filename) as file:
        content = json.load(file)

    return content


def exists(filename):
    return os.path.isfile(filename)


def save(filename, content=None):
    # saves the json content to a file, creating parent directories

    os.makedirs(os.path.dirname(filename) or ".", exist_ok=True)
    with open(filename, "w") as outfile:
        json.dump(
            content if content is not None else {},
            outfile,
            indent=2,
        )

    return outfile
