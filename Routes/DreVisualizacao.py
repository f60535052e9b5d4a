from datetime import datetime

from flask import Blueprint, jsonify, request, send_file
from flask_login import current_user

from Db.Connections import ObterSessao
from Reports.DreAgregacao import MESES
from Services.DreVisualizacaoService import DreVisualizacaoService
from Utils.Logger import RegistrarLog
from Utils.Security import RequiresPermission

dre_visualizacao_bp = Blueprint('DreVisualizacao', __name__)

PERMISSAO = 'dre.visualizar'


def _ParametrosPeriodo():
    """Mês/ano da query string; padrão é o mês corrente."""
    hoje = datetime.now()
    mes = request.args.get('mes') or MESES[hoje.month - 1]
    ano = request.args.get('ano') or hoje.year
    return mes, ano


@dre_visualizacao_bp.route('/api/filtros', methods=['GET'])
@RequiresPermission(PERMISSAO)
def ObterFiltros():
    """Empresas permitidas, meses e anos para os seletores da tela."""
    session_db = ObterSessao()
    try:
        svc = DreVisualizacaoService(session_db, current_user)
        return jsonify({
            "empresas": svc.ObterEmpresasPermitidas(),
            "meses": list(MESES),
            "anos": svc.AnosDisponiveis(datetime.now().year),
        }), 200
    except Exception as e:
        RegistrarLog("Erro API ObterFiltros (DRE)", "ERROR", e)
        return jsonify({"error": "Erro ao carregar dados do DRE"}), 500
    finally:
        session_db.close()


@dre_visualizacao_bp.route('/api/dre', methods=['GET'])
@RequiresPermission(PERMISSAO)
def GerarDre():
    """Query string: empresa_id, mes (nome ou 1-12), ano."""
    session_db = ObterSessao()
    try:
        mes, ano = _ParametrosPeriodo()
        RegistrarLog(f"Rota API: DRE {mes}/{ano}. User: {current_user.nome}", "HTTP")
        svc = DreVisualizacaoService(session_db, current_user)
        return jsonify(svc.GerarDre(request.args.get('empresa_id'), mes, ano)), 200
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        RegistrarLog("Erro API GerarDre", "ERROR", e)
        return jsonify({"error": "Erro ao carregar dados do DRE"}), 500
    finally:
        session_db.close()


@dre_visualizacao_bp.route('/api/dre/excel', methods=['GET'])
@RequiresPermission(PERMISSAO)
def DownloadExcel():
    session_db = ObterSessao()
    try:
        mes, ano = _ParametrosPeriodo()
        RegistrarLog(f"Download Excel DRE iniciado por {current_user.get_id()}", "WEB_EXPORT")

        svc = DreVisualizacaoService(session_db, current_user)
        arquivo_binario = svc.GerarExcelDre(request.args.get('empresa_id'), mes, ano)

        if not arquivo_binario:
            return jsonify({'message': 'Sem dados para exportar'}), 404

        return send_file(
            arquivo_binario,
            mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
            as_attachment=True,
            download_name=svc.NomeArquivoExcel(mes, ano)
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        RegistrarLog("Erro no Download Excel DRE", "ERROR", e)
        return jsonify({"error": "Erro ao carregar dados do DRE"}), 500
    finally:
        session_db.close()
