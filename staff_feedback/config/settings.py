"""
Fixed settings for the staff feedback form: rating scale, evaluation criteria
and the column layout of the staff and feedback tables.
"""
from collections import namedtuple

RATING_MIN = 1
RATING_MAX = 5

Criterion = namedtuple('Criterion', ['key', 'column', 'title'])

# Display order; every criterion is required
CRITERIA = (
    Criterion('professional_conduct', 'postura_prof', 'Professional conduct'),
    Criterion('classroom_observation', 'observacoes_sala_aula', 'Classroom observation'),
    Criterion('feedback_delivery', 'feedback', 'Feedback delivery'),
    Criterion('feedback_follow_up', 'feedback_evolucao', 'Progress after feedback'),
    Criterion('planning', 'planejamento_org', 'Planning and organisation'),
    Criterion('content_mastery', 'dominio_conteudo', 'Content mastery'),
    Criterion('learning_management', 'gestao_aprendizagem', 'Learning management'),
    Criterion('communication', 'comunicacao_rel', 'Communication and relationships'),
)

CRITERIA_BY_KEY = {criterion.key: criterion for criterion in CRITERIA}

# Column holding the unit (school) name in the staff table
UNIT_COLUMN = 'ESCOLA'
STAFF_NAME_COLUMN = 'Nome'

# StaffRecord attribute -> staff table column
STAFF_COLUMNS = {
    'regional': 'REGIONAL',
    'registration_id': 'Cadastro',
    'name': 'Nome',
    'admission_date': 'Admissão',
    'national_id': 'CPF',
    'role': 'Cargo',
    'location': 'Local',
    'unit': 'ESCOLA',
    'monthly_hours': 'Horas_Mes',
    'weekly_hours': 'Horas_Semana',
    'tenure_months': 'tempo_casa_mes',
    'total_workload': 'total_carga_horaria',
    'unjustified_absence_hours': 'horas_faltas_injustificadas',
    'unjustified_absence_pct': 'porcentagem_horas_faltas_injustificadas',
    'justified_absence_hours': 'horas_faltas_justificadas',
    'justified_absence_pct': 'porcentagem_horas_faltas_justificadas',
}

# StaffRecord attribute -> feedback table column
FEEDBACK_STAFF_COLUMNS = {
    'name': 'nome_professor',
    'regional': 'regional',
    'registration_id': 'cadastro',
    'admission_date': 'admissao',
    'national_id': 'cpf',
    'role': 'cargo',
    'location': 'local',
    'unit': 'escola',
    'monthly_hours': 'horas_mes',
    'weekly_hours': 'horas_semana',
    'tenure_months': 'tempo_casa_mes',
    'total_workload': 'total_carga_horaria',
    'unjustified_absence_hours': 'horas_faltas_injustificadas',
    'unjustified_absence_pct': 'porcentagem_horas_faltas_injustificadas',
    'justified_absence_hours': 'horas_faltas_justificadas',
    'justified_absence_pct': 'porcentagem_horas_faltas_justificadas',
}

FEEDBACK_UNIT_COLUMN = 'unidade'
FEEDBACK_REMARKS_COLUMN = 'consideracoes'
SUBMITTER_ID_COLUMN = 'user_id'
SUBMITTER_NAME_COLUMN = 'user_name'


def quote_column(column: str) -> str:
    """Double-quote column names that are not plain ASCII identifiers."""
    if column.isascii() and column.replace('_', '').isalnum():
        return column
    return f'"{column}"'


def staff_select_clause() -> str:
    """
    Build the PostgREST select clause for staff rows.

    Returns:
        str: Comma separated column list
    """
    return ','.join(quote_column(column) for column in STAFF_COLUMNS.values())


def mirror_columns() -> list:
    """Column order of the spreadsheet mirror."""
    return (
        [SUBMITTER_ID_COLUMN, SUBMITTER_NAME_COLUMN, FEEDBACK_UNIT_COLUMN]
        + list(FEEDBACK_STAFF_COLUMNS.values())
        + [criterion.column for criterion in CRITERIA]
        + [FEEDBACK_REMARKS_COLUMN]
    )
