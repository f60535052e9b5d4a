from flask import Blueprint, jsonify
from flask_login import login_required, current_user

main_bp = Blueprint('Main', __name__)

# Telas do sistema e a permissão exigida por cada uma
TELAS = [
    {"nome": "Estrutura de Contas", "url": "/DreConfig", "permissao": "dre.configurar"},
    {"nome": "Modelo de DRE", "url": "/DreModelo", "permissao": "dre.modelo"},
    {"nome": "Contas por Empresa", "url": "/EmpresasContasDre", "permissao": "dre.empresas"},
    {"nome": "Indicadores", "url": "/Indicadores", "permissao": "indicadores.gerenciar"},
    {"nome": "Visualizar DRE", "url": "/DreVisualizacao", "permissao": "dre.visualizar"},
]


@main_bp.route('/dashboard')
@login_required
def MenuPrincipal():
    """Dados do usuário logado e as telas que ele pode abrir."""
    return jsonify({
        "usuario": current_user.ParaDict(),
        "menus": [
            {"nome": t["nome"], "url": t["url"]}
            for t in TELAS if current_user.has_permission(t["permissao"])
        ],
    }), 200
