# Punto de entrada WSGI (gunicorn/waitress): wsgi:app
from lanches_pos.main import app

if __name__ == '__main__':
    app.run()
