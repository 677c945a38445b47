from daofactory import create_app

app = create_app()
