from wapmarket import create_app

app = create_app()
