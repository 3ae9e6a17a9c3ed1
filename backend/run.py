from rps import create_app, socketio

app = create_app()

if __name__ == '__main__':
    # Binding failures propagate: nothing useful can run without the port.
    # Werkzeug is only used when neither eventlet nor gevent is installed.
    socketio.run(
        app,
        host=app.config['HOST'],
        port=app.config['PORT'],
        allow_unsafe_werkzeug=True,
    )
