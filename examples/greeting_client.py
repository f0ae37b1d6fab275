import greeter
from greeter.config import DEFAULT_PORT

if __name__ == "__main__":
    with greeter.create_sync_client(greeter.Address("localhost", DEFAULT_PORT)) as client:
        while True:
            print("Enter your name:")
            name = input()
            print(client.greet(name).message)
