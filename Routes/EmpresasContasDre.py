from flask import Blueprint, jsonify, request
from flask_login import current_user

from Db.Connections import ObterSessao
from Services.EmpresasContasDreService import EmpresasContasDreService
from Utils.Common import parse_bool
from Utils.Logger import RegistrarLog
from Utils.Security import RequiresPermission

empresas_contas_bp = Blueprint('EmpresasContasDre', __name__)

PERMISSAO = 'dre.empresas'


@empresas_contas_bp.route('/api/<empresa_id>/configuracao', methods=['GET'])
@RequiresPermission(PERMISSAO)
def ListarConfiguracao(empresa_id):
    """Árvore conta -> secundárias -> componentes com as marcações da empresa."""
    session_db = ObterSessao()
    try:
        return jsonify(EmpresasContasDreService(session_db).ListarConfiguracao(empresa_id)), 200
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        RegistrarLog("Erro API ListarConfiguracao", "ERROR", e)
        return jsonify({"error": "Erro ao carregar contas"}), 500
    finally:
        session_db.close()


@empresas_contas_bp.route('/api/<empresa_id>/resumo', methods=['GET'])
@RequiresPermission(PERMISSAO)
def ListarResumo(empresa_id):
    session_db = ObterSessao()
    try:
        return jsonify(EmpresasContasDreService(session_db).ListarResumo(empresa_id)), 200
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        RegistrarLog("Erro API ListarResumo", "ERROR", e)
        return jsonify({"error": "Erro ao carregar contas"}), 500
    finally:
        session_db.close()


@empresas_contas_bp.route('/api/<empresa_id>/contas/<conta_id>', methods=['POST'])
@RequiresPermission(PERMISSAO)
def AlternarConta(empresa_id, conta_id):
    """Body: {marcado: bool}."""
    session_db = ObterSessao()
    try:
        dados = request.get_json(silent=True) or {}
        EmpresasContasDreService(session_db).AlternarConta(
            empresa_id, conta_id, parse_bool(dados.get('marcado', True))
        )
        session_db.commit()
        return jsonify({"success": True}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API AlternarConta", "ERROR", e)
        return jsonify({"error": "Erro ao atualizar conta"}), 500
    finally:
        session_db.close()


@empresas_contas_bp.route('/api/<empresa_id>/contas/<conta_id>/ordem', methods=['POST'])
@RequiresPermission(PERMISSAO)
def AtualizarOrdem(empresa_id, conta_id):
    """Body: {ordem: int}."""
    session_db = ObterSessao()
    try:
        dados = request.get_json(silent=True) or {}
        EmpresasContasDreService(session_db).AtualizarOrdem(empresa_id, conta_id, dados.get('ordem'))
        session_db.commit()
        return jsonify({"success": True}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API AtualizarOrdem", "ERROR", e)
        return jsonify({"error": "Erro ao atualizar ordem das contas"}), 500
    finally:
        session_db.close()


@empresas_contas_bp.route('/api/<empresa_id>/componentes/<componente_id>', methods=['POST'])
@RequiresPermission(PERMISSAO)
def AlternarComponente(empresa_id, componente_id):
    """Body: {conta_id} ou {conta_secundaria_id} (exatamente um)."""
    session_db = ObterSessao()
    try:
        dados = request.get_json(silent=True) or {}
        selecionado = EmpresasContasDreService(session_db).AlternarComponente(
            empresa_id,
            componente_id,
            conta_id=dados.get('conta_id'),
            conta_secundaria_id=dados.get('conta_secundaria_id'),
        )
        session_db.commit()
        return jsonify({"success": True, "selecionado": selecionado}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API AlternarComponente", "ERROR", e)
        return jsonify({"error": "Erro ao atualizar componente"}), 500
    finally:
        session_db.close()


@empresas_contas_bp.route('/api/copiar', methods=['POST'])
@RequiresPermission(PERMISSAO)
def CopiarEstrutura():
    """Body: {origem_id, destino_id}. Substitui toda a configuração do destino."""
    session_db = ObterSessao()
    try:
        dados = request.get_json(silent=True) or {}
        RegistrarLog(
            f"Rota API: Copiar estrutura {dados.get('origem_id')} -> {dados.get('destino_id')}. "
            f"User: {current_user.nome}", "HTTP"
        )
        copiados = EmpresasContasDreService(session_db).CopiarEstrutura(
            dados.get('origem_id'), dados.get('destino_id')
        )
        session_db.commit()
        return jsonify({"success": True, "msg": "Estrutura copiada com sucesso!", "copiados": copiados}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API CopiarEstrutura", "ERROR", e)
        return jsonify({"error": "Erro ao copiar estrutura"}), 500
    finally:
        session_db.close()
