import sys
from xml.etree import ElementTree


def main() -> None:
    ElementTree.fromstring(sys.stdin.buffer.read())  # noqa: S314


if __name__ == "__main__":
    main()
