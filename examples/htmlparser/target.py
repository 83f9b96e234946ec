import sys
from html.parser import HTMLParser


def main() -> None:
    parser = HTMLParser()
    parser.feed(sys.stdin.buffer.read().decode("utf-8", errors="replace"))
    parser.close()


if __name__ == "__main__":
    main()
