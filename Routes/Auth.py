from flask import Blueprint, jsonify, request
from flask_login import login_user, logout_user, login_required, current_user

from Db.Connections import ObterSessao
from Services.AutenticacaoService import AutenticacaoService
from Utils.Logger import RegistrarLog

auth_bp = Blueprint('Auth', __name__)


def CarregarUsuarioFlask(user_id):
    """
    Função auxiliar usada pelo LoginManager no App.py.
    Delega a busca para o serviço.
    """
    session_db = ObterSessao()
    try:
        return AutenticacaoService(session_db).CarregarUsuarioCompleto(user_id)
    finally:
        session_db.close()


@auth_bp.route('/login', methods=['POST'])
def Login():
    """Body JSON: {username, password}. Valida no AD e no cadastro do sistema."""
    dados = request.get_json(silent=True) or request.form
    username = (dados.get('username') or '').strip()
    password = dados.get('password')

    session_db = ObterSessao()
    try:
        usuario_flask = AutenticacaoService(session_db).Autenticar(username, password)
        login_user(usuario_flask)
        return jsonify({
            "success": True,
            "msg": f"Bem-vindo(a), {usuario_flask.nome_completo}!",
            "usuario": usuario_flask.ParaDict(),
        }), 200
    except ValueError as e:
        return jsonify({"error": str(e)}), 401
    except Exception as e:
        RegistrarLog("Erro técnico no fluxo de login", "ERROR", erro=e)
        return jsonify({"error": "Erro ao validar usuário no banco."}), 500
    finally:
        session_db.close()


@auth_bp.route('/logout', methods=['POST'])
@login_required
def Logout():
    nome_usuario = current_user.nome
    logout_user()
    RegistrarLog(f"Logout efetuado pelo usuário: {nome_usuario}", "AUTH")
    return jsonify({"success": True, "msg": "Você saiu do sistema."}), 200


@auth_bp.route('/me', methods=['GET'])
@login_required
def UsuarioAtual():
    return jsonify(current_user.ParaDict()), 200
