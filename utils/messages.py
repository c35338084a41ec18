"""
Centralized Portuguese UI messages.
All user-facing text in one place for consistency.
"""

MESSAGES = {
    # Success messages
    'login_success': 'Bem-vindo, {name}',
    'logout_success': 'Sessão encerrada',
    'reservation_created': 'Solicitação de agendamento enviada',
    'reservation_approved': 'Agendamento aprovado com sucesso',
    'reservation_rejected': 'Agendamento rejeitado',
    'reservations_rejected': '{count} agendamento(s) rejeitado(s)',
    'auto_rejected': '{count} solicitação(ões) concorrente(s) rejeitada(s) automaticamente',
    'recurring_created': 'Agendamento fixo criado com sucesso',
    'recurring_updated': 'Agendamento fixo atualizado com sucesso',
    'recurring_deactivated': 'Agendamento fixo desativado',
    'space_created': 'Espaço criado com sucesso',
    'space_updated': 'Espaço atualizado com sucesso',
    'user_created': 'Usuário criado com sucesso',
    'user_updated': 'Usuário atualizado com sucesso',
    'user_deleted': 'Usuário desativado com sucesso',
    'manager_spaces_updated': 'Espaços do gestor atualizados',

    # Warning messages
    'pending_competition': (
        'Existe outro agendamento pendente para este horário. '
        'O gestor deverá escolher entre eles.'
    ),
    'recurring_shadows_reservations': (
        'Existem {count} agendamento(s) neste horário que ficam bloqueados pelo agendamento fixo'
    ),

    # Error messages
    'invalid_credentials': 'Usuário ou senha incorretos',
    'account_inactive': 'Sua conta foi desativada. Contate o administrador.',
    'permission_denied': 'Você não tem permissão para esta ação',
    'space_not_found': 'Espaço não encontrado',
    'space_inactive': 'Este espaço está desativado',
    'space_name_exists': 'Já existe um espaço com este nome',
    'reservation_not_found': 'Agendamento não encontrado',
    'recurring_not_found': 'Agendamento fixo não encontrado',
    'user_not_found': 'Usuário não encontrado',
    'username_exists': 'Este nome de usuário já existe',
    'email_exists': 'Este email já está em uso',
    'email_invalid': 'Formato de email inválido',
    'password_too_short': 'A senha deve ter pelo menos 8 caracteres',
    'password_weak': 'A senha deve conter letras e números',
    'cannot_delete_self': 'Você não pode desativar a sua própria conta',
    'last_admin': 'Deve existir pelo menos um administrador ativo',
    'not_a_manager': 'Apenas gestores podem ser responsáveis por espaços',
    'slot_blocked_recurring': 'Este horário está bloqueado por um agendamento fixo',
    'slot_already_approved': 'Este horário já está aprovado para outro usuário',
    'concurrent_modification': (
        'O agendamento foi alterado por outra pessoa. Atualize a página e tente novamente.'
    ),
    'too_many_attempts': 'Muitas tentativas. Aguarde um momento e tente novamente.',
    'invalid_data': 'Dados inválidos',
    'not_found': 'Recurso não encontrado',
    'internal_error': 'Erro interno do servidor',
}
