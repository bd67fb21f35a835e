"""Run the bridge: python -m badge_print_bridge"""

from .app import main

if __name__ == '__main__':
    main()
