"""
User administration forms (JSON bodies, see blueprints.booking.forms.JsonForm).
"""

from wtforms import BooleanField, PasswordField, SelectMultipleField, StringField
from wtforms.validators import AnyOf, DataRequired, Length, Optional

from blueprints.booking.forms import JsonForm
from models.user import ROLES, ROLE_USER

ROLE_MESSAGE = 'Perfil inválido'


class UserCreateForm(JsonForm):
    """New account; space_ids only apply to gestores."""

    username = StringField('Usuário', validators=[
        DataRequired(message='O usuário é obrigatório'),
        Length(min=3, max=50, message='O usuário deve ter entre 3 e 50 caracteres')
    ])

    email = StringField('Email', validators=[
        DataRequired(message='O email é obrigatório'),
        Length(max=120)
    ])

    password = PasswordField('Senha', validators=[
        DataRequired(message='A senha é obrigatória')
    ])

    full_name = StringField('Nome', validators=[
        DataRequired(message='O nome é obrigatório'),
        Length(max=100)
    ])

    phone = StringField('Telefone', validators=[Optional(), Length(max=20)])

    role = StringField('Perfil', default=ROLE_USER, validators=[
        Optional(),
        AnyOf(ROLES, message=ROLE_MESSAGE)
    ])

    space_ids = SelectMultipleField('Espaços', coerce=int, validate_choice=False)


class UserUpdateForm(JsonForm):
    """Partial update: only the keys present in the body are changed."""

    email = StringField('Email', validators=[Optional(), Length(max=120)])

    full_name = StringField('Nome', validators=[Optional(), Length(max=100)])

    phone = StringField('Telefone', validators=[Optional(), Length(max=20)])

    role = StringField('Perfil', validators=[
        Optional(),
        AnyOf(ROLES, message=ROLE_MESSAGE)
    ])

    active = BooleanField('Ativo')

    password = PasswordField('Nova senha', validators=[Optional()])


class ManagerSpacesForm(JsonForm):
    space_ids = SelectMultipleField('Espaços', coerce=int, validate_choice=False)
