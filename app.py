from restaurant_backend import create_app, db

app = create_app()

with app.app_context():
    db.create_all()


if __name__ == '__main__':
    app.run(host="0.0.0.0", port=app.config["PORT"], debug=app.debug)
