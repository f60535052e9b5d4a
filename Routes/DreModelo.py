from flask import Blueprint, jsonify, request
from flask_login import current_user

from Db.Connections import ObterSessao
from Services.DreModeloService import DreModeloService
from Utils.Logger import RegistrarLog
from Utils.Security import RequiresPermission

dre_modelo_bp = Blueprint('DreModelo', __name__)

PERMISSAO = 'dre.modelo'


# ============================================================
# CONTAS MODELO
# ============================================================

@dre_modelo_bp.route('/api/contas', methods=['GET'])
@RequiresPermission(PERMISSAO)
def ListarContas():
    session_db = ObterSessao()
    try:
        return jsonify(DreModeloService(session_db).ListarContasModelo()), 200
    except Exception as e:
        RegistrarLog("Erro API ListarContasModelo", "ERROR", e)
        return jsonify({"error": "Erro ao carregar contas"}), 500
    finally:
        session_db.close()


@dre_modelo_bp.route('/api/contas', methods=['POST'])
@RequiresPermission(PERMISSAO)
def SalvarConta():
    """Upsert: com 'id' no corpo edita, sem 'id' cria."""
    session_db = ObterSessao()
    try:
        RegistrarLog(f"Rota API: Salvar conta modelo. User: {current_user.nome}", "HTTP")
        conta = DreModeloService(session_db).SalvarContaModelo(request.get_json(silent=True) or {})
        session_db.commit()
        return jsonify({"success": True, "msg": "Conta salva com sucesso!", "conta": conta}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API SalvarContaModelo", "ERROR", e)
        return jsonify({"error": "Erro ao salvar conta"}), 500
    finally:
        session_db.close()


@dre_modelo_bp.route('/api/contas/<conta_id>', methods=['DELETE'])
@RequiresPermission(PERMISSAO)
def ExcluirConta(conta_id):
    session_db = ObterSessao()
    try:
        RegistrarLog(f"Rota API: Excluir conta modelo {conta_id}. User: {current_user.nome}", "HTTP")
        DreModeloService(session_db).ExcluirContaModelo(conta_id)
        session_db.commit()
        return jsonify({"success": True, "msg": "Conta excluída com sucesso!"}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API ExcluirContaModelo", "ERROR", e)
        return jsonify({"error": "Erro ao excluir conta"}), 500
    finally:
        session_db.close()


# ============================================================
# CONTAS SECUNDÁRIAS
# ============================================================

@dre_modelo_bp.route('/api/contas/<conta_id>/secundarias', methods=['GET'])
@RequiresPermission(PERMISSAO)
def ListarContasSecundarias(conta_id):
    session_db = ObterSessao()
    try:
        return jsonify(DreModeloService(session_db).ListarContasSecundarias(conta_id)), 200
    except Exception as e:
        RegistrarLog("Erro API ListarContasSecundarias", "ERROR", e)
        return jsonify({"error": "Erro ao carregar contas"}), 500
    finally:
        session_db.close()


@dre_modelo_bp.route('/api/contas/<conta_id>/secundarias', methods=['POST'])
@RequiresPermission(PERMISSAO)
def SalvarContaSecundaria(conta_id):
    session_db = ObterSessao()
    try:
        secundaria = DreModeloService(session_db).SalvarContaSecundaria(conta_id, request.get_json(silent=True) or {})
        session_db.commit()
        return jsonify({"success": True, "msg": "Conta salva com sucesso!", "conta_secundaria": secundaria}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API SalvarContaSecundaria", "ERROR", e)
        return jsonify({"error": "Erro ao salvar conta"}), 500
    finally:
        session_db.close()


@dre_modelo_bp.route('/api/secundarias/<secundaria_id>', methods=['DELETE'])
@RequiresPermission(PERMISSAO)
def ExcluirContaSecundaria(secundaria_id):
    session_db = ObterSessao()
    try:
        DreModeloService(session_db).ExcluirContaSecundaria(secundaria_id)
        session_db.commit()
        return jsonify({"success": True, "msg": "Conta excluída com sucesso!"}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API ExcluirContaSecundaria", "ERROR", e)
        return jsonify({"error": "Erro ao excluir conta"}), 500
    finally:
        session_db.close()


# ============================================================
# COMPONENTES
# ============================================================

@dre_modelo_bp.route('/api/contas/<conta_id>/componentes', methods=['GET'])
@RequiresPermission(PERMISSAO)
def ListarComponentes(conta_id):
    session_db = ObterSessao()
    try:
        return jsonify(DreModeloService(session_db).ListarComponentes(conta_id)), 200
    except Exception as e:
        RegistrarLog("Erro API ListarComponentes", "ERROR", e)
        return jsonify({"error": "Erro ao carregar contas"}), 500
    finally:
        session_db.close()


@dre_modelo_bp.route('/api/contas/<conta_id>/componentes', methods=['POST'])
@RequiresPermission(PERMISSAO)
def SalvarComponente(conta_id):
    session_db = ObterSessao()
    try:
        RegistrarLog(f"Rota API: Salvar componente da conta {conta_id}. User: {current_user.nome}", "HTTP")
        componente = DreModeloService(session_db).SalvarComponente(conta_id, request.get_json(silent=True) or {})
        session_db.commit()
        return jsonify({"success": True, "msg": "Componente salvo com sucesso!", "componente": componente}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API SalvarComponente", "ERROR", e)
        return jsonify({"error": "Erro ao salvar componente"}), 500
    finally:
        session_db.close()


@dre_modelo_bp.route('/api/componentes/<componente_id>', methods=['DELETE'])
@RequiresPermission(PERMISSAO)
def ExcluirComponente(componente_id):
    session_db = ObterSessao()
    try:
        DreModeloService(session_db).ExcluirComponente(componente_id)
        session_db.commit()
        return jsonify({"success": True, "msg": "Componente excluído com sucesso!"}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API ExcluirComponente", "ERROR", e)
        return jsonify({"error": "Erro ao excluir componente"}), 500
    finally:
        session_db.close()
