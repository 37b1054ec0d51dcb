from flask_wtf import FlaskForm
from wtforms import StringField, SubmitField, SelectField, DateField, IntegerField, TextAreaField
from wtforms.validators import DataRequired, Optional, NumberRange, Regexp, URL, ValidationError

from dancebook.models import LEVELS

TIME_PATTERN = r'^([01]\d|2[0-3]):[0-5]\d$'


class CourseForm(FlaskForm):
    title = StringField('Title', validators=[DataRequired()])
    description = TextAreaField('Description', validators=[DataRequired()])
    level = SelectField('Level', choices=[(level, level.capitalize()) for level in LEVELS], validators=[DataRequired()])
    image_url = StringField('Image URL', validators=[Optional(), URL()])
    submit = SubmitField('Save Course')


class ClassForm(FlaskForm):
    course_id = SelectField('Course', validators=[DataRequired()])
    title = StringField('Title', validators=[DataRequired()])
    description = TextAreaField('Description', validators=[Optional()])
    date = DateField('Date', format='%Y-%m-%d', validators=[DataRequired()])
    start_time = StringField('Start Time', validators=[DataRequired(), Regexp(TIME_PATTERN, message='Use HH:MM')])
    end_time = StringField('End Time', validators=[DataRequired(), Regexp(TIME_PATTERN, message='Use HH:MM')])
    capacity = IntegerField('Capacity', default=20, validators=[Optional(), NumberRange(min=1, message='Capacity must be a positive number')])
    instructor = StringField('Instructor', validators=[DataRequired()])
    location = StringField('Location', validators=[DataRequired()])
    submit = SubmitField('Save Class')

    def validate_end_time(self, field):
        # HH:MM strings compare correctly as text
        if self.start_time.data and field.data and field.data <= self.start_time.data:
            raise ValidationError('End time must be after start time')
