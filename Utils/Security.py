from functools import wraps
from flask import jsonify
from flask_login import current_user

# Papel -> permissões. 'admin.master' libera tudo.
PERMISSOES_POR_PAPEL = {
    'master': {'admin.master'},
    'consultor': {
        'dre.configurar',
        'dre.modelo',
        'dre.empresas',
        'indicadores.gerenciar',
        'dre.visualizar',
    },
    'cliente': {'dre.visualizar'},
}


def PermissoesDoPapel(role):
    """Conjunto (cópia) de permissões do papel; papel desconhecido não tem nenhuma."""
    return set(PERMISSOES_POR_PAPEL.get(role, set()))


def RequiresPermission(permission_slug):
    """
    Decorator das rotas da API.

    Como usar:
        @bp.route('/api/contas')
        @RequiresPermission('dre.configurar')
        def ListarContas():
            ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # 1. Autenticação
            if not current_user.is_authenticated:
                return jsonify({"error": "Usuário não autenticado."}), 401

            # 2. Permissão específica (has_permission do UsuarioWrapper)
            if not current_user.has_permission(permission_slug):
                return jsonify({"error": f"Acesso negado. Requer permissão: {permission_slug}"}), 403

            return f(*args, **kwargs)
        return decorated_function
    return decorator
