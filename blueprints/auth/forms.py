"""
Authentication forms using Flask-WTF.
Fed from JSON bodies; CSRF is enforced globally through the request header.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, BooleanField
from wtforms.validators import DataRequired


class LoginForm(FlaskForm):
    """Login form with username and password."""

    class Meta:
        csrf = False

    username = StringField('Usuário', validators=[
        DataRequired(message='O usuário é obrigatório')
    ])

    password = PasswordField('Senha', validators=[
        DataRequired(message='A senha é obrigatória')
    ])

    remember_me = BooleanField('Lembrar-me')
