"""
{{ name }} Service
"""


def main():
    print("{{ name }} service is running...")


if __name__ == "__main__":
    main()
