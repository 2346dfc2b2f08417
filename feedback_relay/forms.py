from flask_wtf import FlaskForm
from wtforms import HiddenField, SelectField, StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Length, Optional

from feedback_relay.models import FEEDBACK_TYPES, IMPACT_LEVELS
from feedback_relay.services.uploads import file_size
from feedback_relay.utils.validators import clean_str, is_allowed_media

IMPACT_CHOICES = [
    ("", "Selecione..."),
    ("baixo", "Baixo - Melhoria menor"),
    ("medio", "Médio - Impacta algumas funcionalidades"),
    ("alto", "Alto - Impacta funcionalidades principais"),
    ("critico", "Crítico - Bloqueia o uso da plataforma"),
]

FILE_TYPE_ERROR = "Tipo de arquivo não permitido. Use apenas imagens ou vídeos."


class FeedbackForm(FlaskForm):
    """Field names match the multipart keys the page and webhook use."""

    class Meta:
        # Posted by fetch() and by scripts; the api blueprint is CSRF-exempt
        csrf = False

    companyName = StringField(
        "Nome da empresa",
        filters=[clean_str],
        validators=[
            DataRequired(message="Nome da empresa é obrigatório"),
            Length(max=255, message="Nome da empresa deve ter no máximo 255 caracteres"),
        ],
    )
    description = TextAreaField("Descrição", validators=[Optional()])
    impactLevel = SelectField(
        "Impacto",
        choices=IMPACT_CHOICES,
        validate_choice=False,
        filters=[clean_str],
        validators=[Optional(), AnyOf(IMPACT_LEVELS, message="Nível de impacto inválido")],
    )
    feedbackType = HiddenField(
        "Tipo de feedback",
        filters=[clean_str],
        validators=[
            DataRequired(message="Tipo de feedback é obrigatório"),
            AnyOf(FEEDBACK_TYPES, message="Tipo de feedback inválido"),
        ],
    )

    def to_record(self) -> dict:
        """Snake-case payload for storage.create_feedback (attachments added by the caller)."""
        return {
            "company_name": self.companyName.data,
            "description": self.description.data or None,
            "impact_level": self.impactLevel.data or None,
            "feedback_type": self.feedbackType.data,
        }


def error_list(errors: dict) -> list[dict]:
    """{"field": [msgs]} -> [{"field", "message"}], the shape the page renders."""
    out = []
    for field_name, messages in errors.items():
        for message in messages:
            out.append({"field": field_name, "message": message})
    return out


def upload_errors(files, max_size: int, allowed_exts=None) -> list[dict]:
    """Per-file type/size checks; every offending file gets its own entry."""
    errors = []
    for storage in files:
        name = storage.filename or ""
        if not is_allowed_media(name, storage.mimetype, allowed_exts):
            errors.append({"field": "files", "message": f"{name}: {FILE_TYPE_ERROR}"})
            continue
        if file_size(storage) > max_size:
            limit_mb = max_size // (1024 * 1024)
            errors.append({"field": "files", "message": f"{name}: Tamanho máximo {limit_mb}MB"})
    return errors
