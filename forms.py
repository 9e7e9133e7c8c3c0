from flask_wtf import FlaskForm
from wtforms import (
    StringField,
    BooleanField,
    SubmitField,
    TextAreaField,
    DateTimeLocalField,
)
from wtforms.validators import (
    DataRequired,
    Length,
    ValidationError,
    Optional,
)


def split_labels(raw):
    """Split comma separated label input into a list of labels."""
    if not raw:
        return []
    return [label.strip() for label in raw.split(",") if label.strip()]


class DreamEntryForm(FlaskForm):
    """Form for recording a new dream."""

    content = TextAreaField(
        "Dream",
        validators=[DataRequired(message="Describe your dream before interpreting it")],
    )
    is_lucid = BooleanField("Lucid Dream")
    is_favorite = BooleanField("Favorite")
    section_id = StringField("Collection", validators=[Optional()])
    labels = StringField("Custom labels", validators=[Optional(), Length(max=500)])
    submit = SubmitField("Interpret Dream")

    def validate_content(self, content):
        if not content.data.strip():
            raise ValidationError("Describe your dream before interpreting it")


class DreamEditForm(FlaskForm):
    """Form for editing content, date or labels of a dream."""

    content = TextAreaField("Dream", validators=[Optional()])
    date = DateTimeLocalField(
        "Date", format=["%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S"], validators=[Optional()]
    )
    labels = StringField("Custom labels", validators=[Optional(), Length(max=500)])
    submit = SubmitField("Save Dream")


class CollectionForm(FlaskForm):
    name = StringField(
        "Collection name",
        validators=[DataRequired(), Length(min=1, max=64)],
        filters=[lambda value: value.strip() if value else value],
    )
    submit = SubmitField("Create")


class CollectionAssignForm(FlaskForm):
    # Empty value moves the dream out of every collection
    section_id = StringField("Collection", validators=[Optional()])
    submit = SubmitField("Move")


class RedeemCodeForm(FlaskForm):
    code = StringField("Promo code", validators=[DataRequired()])
    submit = SubmitField("Redeem")


class OracleForm(FlaskForm):
    message = StringField("Ask the oracle", validators=[DataRequired(), Length(max=2000)])
    submit = SubmitField("Send")
