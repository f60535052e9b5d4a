from flask import Blueprint, jsonify, request
from flask_login import current_user

from Db.Connections import ObterSessao
from Services.IndicadoresService import IndicadoresService
from Utils.Logger import RegistrarLog
from Utils.Security import RequiresPermission

indicadores_bp = Blueprint('Indicadores', __name__)

PERMISSAO = 'indicadores.gerenciar'


@indicadores_bp.route('/api/empresas', methods=['GET'])
@RequiresPermission(PERMISSAO)
def ListarEmpresas():
    session_db = ObterSessao()
    try:
        return jsonify(IndicadoresService(session_db).ListarEmpresas()), 200
    except Exception as e:
        RegistrarLog("Erro API ListarEmpresas (Indicadores)", "ERROR", e)
        return jsonify({"error": "Erro ao carregar empresas"}), 500
    finally:
        session_db.close()


@indicadores_bp.route('/api/indicadores', methods=['GET'])
@RequiresPermission(PERMISSAO)
def ListarIndicadores():
    """Filtros na query string: busca, tipo (all|manual|calculated), empresa_id."""
    session_db = ObterSessao()
    try:
        indicadores = IndicadoresService(session_db).ListarIndicadores(
            busca=request.args.get('busca', ''),
            tipo=request.args.get('tipo', 'all'),
            empresa_id=request.args.get('empresa_id') or None,
        )
        return jsonify(indicadores), 200
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        RegistrarLog("Erro API ListarIndicadores", "ERROR", e)
        return jsonify({"error": "Erro ao carregar indicadores"}), 500
    finally:
        session_db.close()


@indicadores_bp.route('/api/indicadores', methods=['POST'])
@RequiresPermission(PERMISSAO)
def SalvarIndicador():
    session_db = ObterSessao()
    try:
        RegistrarLog(f"Rota API: Salvar indicador. User: {current_user.nome}", "HTTP")
        indicador = IndicadoresService(session_db).SalvarIndicador(request.get_json(silent=True) or {})
        session_db.commit()
        return jsonify({"success": True, "msg": "Indicador salvo com sucesso!", "indicador": indicador}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API SalvarIndicador", "ERROR", e)
        return jsonify({"error": "Erro ao salvar indicador"}), 500
    finally:
        session_db.close()


@indicadores_bp.route('/api/indicadores/<indicador_id>/empresas/<empresa_id>', methods=['POST'])
@RequiresPermission(PERMISSAO)
def AlternarIndicadorEmpresa(indicador_id, empresa_id):
    session_db = ObterSessao()
    try:
        ativo = IndicadoresService(session_db).AlternarIndicadorEmpresa(indicador_id, empresa_id)
        session_db.commit()
        return jsonify({"success": True, "ativo": ativo}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API AlternarIndicadorEmpresa", "ERROR", e)
        return jsonify({"error": "Erro ao alterar status do indicador"}), 500
    finally:
        session_db.close()


@indicadores_bp.route('/api/indicadores/<indicador_id>', methods=['DELETE'])
@RequiresPermission(PERMISSAO)
def ExcluirIndicador(indicador_id):
    session_db = ObterSessao()
    try:
        RegistrarLog(f"Rota API: Excluir indicador {indicador_id}. User: {current_user.nome}", "HTTP")
        IndicadoresService(session_db).ExcluirIndicador(indicador_id)
        session_db.commit()
        return jsonify({"success": True, "msg": "Indicador excluído com sucesso!"}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API ExcluirIndicador", "ERROR", e)
        return jsonify({"error": "Erro ao excluir indicador"}), 500
    finally:
        session_db.close()
