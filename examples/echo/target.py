import sys


def main() -> None:
    data = sys.stdin.buffer.read()
    sys.stdout.buffer.write(data)
    sys.exit(int(sys.argv[1]) if len(sys.argv) > 1 else 0)


if __name__ == "__main__":
    main()
