"""User-facing message catalog.

One locale is active per deployment (``settings.LOCALE``) so pages never mix
languages. Unknown keys fall back to the English text, unknown statuses are
displayed as-is.
"""
from .config import settings

MESSAGES = {
    "en": {
        "credentials_required": "Username and password are required",
        "password_too_short": "Password must be at least {min_length} characters long",
        "username_taken": "Username already exists",
        "invalid_credentials": "Invalid username or password",
        "current_password_incorrect": "Current password is incorrect",
        "registration_success": "Registration successful! Please login.",
        "profile_updated": "Profile updated successfully",
        "client_name_required": "Client name is required",
        "phone_required": "Phone is required",
        "service_required": "Service is required",
        "invalid_date": "Please enter a valid date",
        "invalid_time": "Time must be in HH:MM format",
        "invalid_status": "Invalid status",
        "client_not_found": "Selected client does not exist",
        "client_fields_required": "All client fields are required",
        "invalid_email": "Please enter a valid email",
        "invalid_birth_date": "Please enter a valid birth date",
        "email_taken": "Email already registered",
        "title_required": "Title is required",
        "login_required": "Authentication required",
        "csrf_failed": "Invalid or missing form token. Please reload the page and try again.",
        "store_error": "An error occurred. Please try again later.",
        "unexpected_error": "An unexpected error occurred",
        "create_client_failed": "Error creating client",
        "search_clients_failed": "Error searching clients",
        "too_long": "{field} must be at most {max_length} characters",
        # Page text
        "app_name": "Booking",
        "nav_appointments": "Appointments",
        "nav_tasks": "Tasks",
        "nav_profile": "Profile",
        "nav_login": "Login",
        "nav_logout": "Logout",
        "nav_register": "Register",
        "home": "Home",
        "error_title": "Error",
        "new_appointment": "New appointment",
        "edit_appointment": "Edit appointment",
        "no_appointments": "No appointments yet",
        "edit": "Edit",
        "delete": "Delete",
        "save": "Save",
        "add": "Add",
        "delete_account": "Delete account",
        # Field labels
        "field_username": "Username",
        "field_password": "Password",
        "field_current_password": "Current password",
        "field_new_password": "New password",
        "field_client_name": "Client name",
        "field_phone": "Phone",
        "field_service": "Service",
        "field_date": "Date",
        "field_time": "Time",
        "field_status": "Status",
        "field_title": "Title",
        "field_description": "Description",
        "field_first_name": "First name",
        "field_last_name": "Last name",
        "field_email": "Email",
        "field_address": "Address",
        "field_neighborhood": "Neighborhood",
        "field_city": "City",
    },
    "pt-BR": {
        "credentials_required": "Nome de Usuário e Senha são obrigatórios",
        "password_too_short": "A senha deve ter pelo menos {min_length} caracteres",
        "username_taken": "O nome de usuário já existe",
        "invalid_credentials": "Nome de usuário ou senha inválidos",
        "current_password_incorrect": "A senha atual está incorreta",
        "registration_success": "Registro realizado com sucesso! Faça o login.",
        "profile_updated": "Perfil atualizado com sucesso",
        "client_name_required": "O nome do cliente é obrigatório",
        "phone_required": "O telefone é obrigatório",
        "service_required": "O serviço é obrigatório",
        "invalid_date": "Informe uma data válida",
        "invalid_time": "O horário deve estar no formato HH:MM",
        "invalid_status": "Status inválido",
        "client_not_found": "O cliente selecionado não existe",
        "client_fields_required": "Todos os campos do cliente são obrigatórios",
        "invalid_email": "Informe um e-mail válido",
        "invalid_birth_date": "Informe uma data de nascimento válida",
        "email_taken": "E-mail já cadastrado",
        "title_required": "O título é obrigatório",
        "login_required": "Autenticação necessária",
        "csrf_failed": "Token de formulário inválido ou ausente. Recarregue a página e tente novamente.",
        "store_error": "Ocorreu um erro. Por favor, tente novamente mais tarde.",
        "unexpected_error": "Ocorreu um erro inesperado",
        "create_client_failed": "Erro ao criar cliente",
        "search_clients_failed": "Erro ao buscar clientes",
        "too_long": "O campo {field} deve ter no máximo {max_length} caracteres",
        # Page text
        "app_name": "Agenda",
        "nav_appointments": "Agendamentos",
        "nav_tasks": "Tarefas",
        "nav_profile": "Perfil",
        "nav_login": "Entrar",
        "nav_logout": "Sair",
        "nav_register": "Cadastrar",
        "home": "Início",
        "error_title": "Erro",
        "new_appointment": "Novo agendamento",
        "edit_appointment": "Editar agendamento",
        "no_appointments": "Nenhum agendamento",
        "edit": "Editar",
        "delete": "Excluir",
        "save": "Salvar",
        "add": "Adicionar",
        "delete_account": "Excluir conta",
        # Field labels
        "field_username": "Nome de usuário",
        "field_password": "Senha",
        "field_current_password": "Senha atual",
        "field_new_password": "Nova senha",
        "field_client_name": "Nome do cliente",
        "field_phone": "Telefone",
        "field_service": "Serviço",
        "field_date": "Data",
        "field_time": "Horário",
        "field_status": "Status",
        "field_title": "Título",
        "field_description": "Descrição",
        "field_first_name": "Nome",
        "field_last_name": "Sobrenome",
        "field_email": "E-mail",
        "field_address": "Endereço",
        "field_neighborhood": "Bairro",
        "field_city": "Cidade",
    },
}

STATUS_LABELS = {
    "en": {
        "scheduled": "Scheduled",
        "completed": "Completed",
        "cancelled": "Cancelled",
    },
    "pt-BR": {
        "scheduled": "Agendado",
        "completed": "Concluído",
        "cancelled": "Cancelado",
    },
}

DATE_FORMATS = {
    "en": "%m/%d/%Y",
    "pt-BR": "%d/%m/%Y",
}


def _locale(locale=None) -> str:
    locale = locale or settings.LOCALE
    return locale if locale in MESSAGES else "en"


def current_locale() -> str:
    return _locale()


def get_message(key: str, locale=None, **kwargs) -> str:
    catalog = MESSAGES[_locale(locale)]
    template = catalog.get(key) or MESSAGES["en"].get(key, key)
    return template.format(**kwargs) if kwargs else template


def status_label(status, locale=None) -> str:
    return STATUS_LABELS[_locale(locale)].get(status, status)


def format_date(value, locale=None) -> str:
    if value is None:
        return ""
    return value.strftime(DATE_FORMATS[_locale(locale)])
