from __future__ import annotations

from flask import Flask, jsonify, redirect, render_template, request, session, url_for

from ..container import Container
from ..core.exceptions import AuthenticationError


def register(app: Flask, container: Container) -> None:
    gate = container.session_gate

    @app.route("/", endpoint="index")
    @gate.redirect_if_authenticated
    def index():
        return redirect(url_for("login"))

    @app.route("/login", methods=["GET"], endpoint="login")
    @gate.redirect_if_authenticated
    def login():
        return render_template("login.html", title=container.app_title)

    @app.route("/login", methods=["POST"], endpoint="login_submit")
    def login_submit():
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            payload = request.form
        password = str(payload.get("password") or "")

        if not password:
            return jsonify({"success": False, "message": "Password is required"})

        try:
            gate.login(session, password)
        except AuthenticationError:
            return jsonify({"success": False, "message": "Invalid password"})

        return jsonify({"success": True, "message": "Login successful"})

    @app.route("/logout", endpoint="logout")
    def logout():
        gate.logout(session)
        return redirect(url_for("login"), code=302)

    @app.route("/dashboard", endpoint="dashboard")
    @gate.login_required
    def dashboard():
        return render_template("dashboard.html", title=container.app_title)
