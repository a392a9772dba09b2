# Run tarstream from a source checkout: python main.py --help
from tarstream.main import main


if __name__ == "__main__":
    main()
