"""
Booking forms using Flask-WTF.

Forms are fed from JSON request bodies (Flask-WTF reads request.get_json()
when the request is JSON). The CSRF token travels in the X-CSRFToken
header and is checked globally by CSRFProtect, so the per-form hidden
token is disabled.
"""

from flask_wtf import FlaskForm
from wtforms import (
    BooleanField, DateField, IntegerField, SelectMultipleField, StringField
)
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional, ValidationError

from models.recurring_schedule import WEEKDAY_LABELS


class JsonForm(FlaskForm):
    class Meta:
        csrf = False


class ReservationForm(JsonForm):
    """Booking request for one date."""

    space_id = IntegerField('Espaço', validators=[
        InputRequired(message='O espaço é obrigatório')
    ])

    reservation_date = StringField('Data', validators=[
        InputRequired(message='Data é obrigatória')
    ])

    start_slot = IntegerField('Aula inicial', validators=[
        InputRequired(message='A aula inicial é obrigatória')
    ])

    end_slot = IntegerField('Aula final', validators=[
        InputRequired(message='A aula final é obrigatória')
    ])

    notes = StringField('Observações', validators=[
        Optional(),
        Length(max=500, message='Observações devem ter no máximo 500 caracteres')
    ])


class RecurringScheduleForm(JsonForm):
    """Dates, weekdays and slots of a recurring reservation."""

    start_date = DateField('Data de início', format='%Y-%m-%d', validators=[
        InputRequired(message='A data de início é obrigatória')
    ])

    end_date = DateField('Data de fim', format='%Y-%m-%d', validators=[
        InputRequired(message='A data de fim é obrigatória')
    ])

    weekdays = SelectMultipleField(
        'Dias da semana',
        choices=list(enumerate(WEEKDAY_LABELS)),
        coerce=int,
        validators=[DataRequired(message='Selecione pelo menos um dia da semana')]
    )

    start_slot = IntegerField('Aula inicial', validators=[
        InputRequired(message='A aula inicial é obrigatória')
    ])

    end_slot = IntegerField('Aula final', validators=[
        InputRequired(message='A aula final é obrigatória')
    ])

    notes = StringField('Observações', validators=[
        Optional(),
        Length(max=500, message='Observações devem ter no máximo 500 caracteres')
    ])

    def validate_end_date(self, field):
        if self.start_date.data and field.data and field.data <= self.start_date.data:
            raise ValidationError('Data de início deve ser anterior à data de fim')

    def validate_end_slot(self, field):
        if self.start_slot.data is not None and field.data is not None \
                and field.data < self.start_slot.data:
            raise ValidationError('Aula de início deve ser anterior ou igual à aula de fim')


class RecurringReservationForm(RecurringScheduleForm):
    """New recurring reservation ("agendamento fixo")."""

    space_id = IntegerField('Espaço', validators=[
        InputRequired(message='O espaço é obrigatório')
    ])


class SpaceForm(JsonForm):
    """Space creation/edition."""

    name = StringField('Nome', validators=[
        DataRequired(message='O nome é obrigatório'),
        Length(max=100)
    ])

    capacity = IntegerField('Capacidade', validators=[
        InputRequired(message='A capacidade é obrigatória'),
        NumberRange(min=1, message='A capacidade deve ser pelo menos 1')
    ])

    description = StringField('Descrição', validators=[Optional(), Length(max=500)])

    equipment = StringField('Equipamentos', validators=[Optional(), Length(max=500)])

    active = BooleanField('Ativo', default=True)


class DecisionForm(JsonForm):
    """Approve/reject body (optional note)."""

    notes = StringField('Observações', validators=[Optional(), Length(max=500)])


class BulkRejectForm(DecisionForm):
    """Reject several reservations at once."""

    reservation_ids = SelectMultipleField(
        'Agendamentos',
        coerce=int,
        validate_choice=False,
        validators=[DataRequired(message='Selecione pelo menos um agendamento')]
    )
