"""
Routes/DreConfig.py
Rotas da Estrutura de Contas da DRE (árvore por empresa) e do modal de conta.

Padrão das rotas:
    - abre a sessão, chama o serviço e faz UM commit no final
    - ValueError do serviço -> 400 com a mensagem
    - qualquer outro erro -> log + 500 com mensagem fixa da tela
"""
from flask import Blueprint, jsonify, request
from flask_login import current_user

from Db.Connections import ObterSessao
from Services.DreConfigService import (
    DreConfigService,
    FiltrarCategoriasFormulario,
    FiltrarIndicadoresFormulario,
)
from Utils.Arvore import AlternarExpansao
from Utils.Logger import RegistrarLog
from Utils.Security import RequiresPermission

dre_config_bp = Blueprint('DreConfig', __name__)

PERMISSAO = 'dre.configurar'


def _ListaParametro(nome):
    """Lê um parâmetro de lista na query string (?x=a,b ou ?x=a&x=b)."""
    valores = []
    for item in request.args.getlist(nome):
        valores.extend(v for v in item.split(',') if v)
    return valores


# ============================================================
# CADASTROS AUXILIARES
# ============================================================

@dre_config_bp.route('/api/empresas', methods=['GET'])
@RequiresPermission(PERMISSAO)
def ListarEmpresas():
    session_db = ObterSessao()
    try:
        return jsonify(DreConfigService(session_db).ListarEmpresas()), 200
    except Exception as e:
        RegistrarLog("Erro API ListarEmpresas", "ERROR", e)
        return jsonify({"error": "Erro ao carregar empresas"}), 500
    finally:
        session_db.close()


@dre_config_bp.route('/api/formulario/categorias', methods=['GET'])
@RequiresPermission(PERMISSAO)
def ListarCategoriasFormulario():
    """Categorias do modal, filtradas pelo subtipo (receita/despesa) e pela busca."""
    session_db = ObterSessao()
    try:
        categorias = DreConfigService(session_db).ListarCategorias()
        filtradas = FiltrarCategoriasFormulario(
            categorias,
            request.args.get('tipo_categoria', 'revenue'),
            request.args.get('busca', '')
        )
        return jsonify(filtradas), 200
    except Exception as e:
        RegistrarLog("Erro API ListarCategoriasFormulario", "ERROR", e)
        return jsonify({"error": "Erro ao carregar categorias"}), 500
    finally:
        session_db.close()


@dre_config_bp.route('/api/formulario/indicadores', methods=['GET'])
@RequiresPermission(PERMISSAO)
def ListarIndicadoresFormulario():
    session_db = ObterSessao()
    try:
        indicadores = DreConfigService(session_db).ListarIndicadores()
        return jsonify(FiltrarIndicadoresFormulario(indicadores, request.args.get('busca', ''))), 200
    except Exception as e:
        RegistrarLog("Erro API ListarIndicadoresFormulario", "ERROR", e)
        return jsonify({"error": "Erro ao carregar indicadores"}), 500
    finally:
        session_db.close()


# ============================================================
# ÁRVORE
# ============================================================

@dre_config_bp.route('/api/contas', methods=['GET'])
@RequiresPermission(PERMISSAO)
def ListarContas():
    """
    Árvore da empresa já achatada nas linhas visíveis.
    Query string: empresa_id, tipo, expandidos (ids) e alternar (id a expandir/recolher).
    """
    session_db = ObterSessao()
    try:
        expandidos = set(_ListaParametro('expandidos'))
        alternar = request.args.get('alternar')
        if alternar:
            expandidos = AlternarExpansao(expandidos, alternar)

        svc = DreConfigService(session_db)
        arvore = svc.ObterArvore(
            request.args.get('empresa_id') or None,
            expandidos,
            request.args.get('tipo', 'all')
        )
        arvore['expandidos'] = sorted(expandidos)
        return jsonify(arvore), 200
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        RegistrarLog("Erro API ListarContas", "ERROR", e)
        return jsonify({"error": "Erro ao carregar contas"}), 500
    finally:
        session_db.close()


@dre_config_bp.route('/api/contas/<conta_id>', methods=['GET'])
@RequiresPermission(PERMISSAO)
def ObterConta(conta_id):
    """Dados da conta para abrir o modal de edição."""
    session_db = ObterSessao()
    try:
        return jsonify(DreConfigService(session_db).ObterConta(conta_id)), 200
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        RegistrarLog(f"Erro API ObterConta {conta_id}", "ERROR", e)
        return jsonify({"error": "Erro ao carregar contas"}), 500
    finally:
        session_db.close()


# ============================================================
# ESCRITA
# ============================================================

@dre_config_bp.route('/api/contas', methods=['POST'])
@dre_config_bp.route('/api/contas/<conta_id>', methods=['PUT'])
@RequiresPermission(PERMISSAO)
def SalvarConta(conta_id=None):
    """Cria (POST) ou edita (PUT) a conta. A empresa vem no corpo (empresa_id)."""
    session_db = ObterSessao()
    try:
        dados = request.get_json(silent=True) or {}
        RegistrarLog(f"Rota API: Salvar conta. User: {current_user.nome}", "HTTP")

        svc = DreConfigService(session_db)
        conta = svc.SalvarConta(dados, dados.get('empresa_id'), conta_id)

        session_db.commit()
        return jsonify({"success": True, "msg": "Conta salva com sucesso!", "conta": conta}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API SalvarConta", "ERROR", e)
        return jsonify({"error": "Erro ao salvar conta. Verifique se todos os campos estão preenchidos corretamente."}), 500
    finally:
        session_db.close()


@dre_config_bp.route('/api/contas/<conta_id>', methods=['DELETE'])
@RequiresPermission(PERMISSAO)
def ExcluirConta(conta_id):
    """Exclui a conta e todas as descendentes."""
    session_db = ObterSessao()
    try:
        RegistrarLog(f"Rota API: Excluir conta {conta_id}. User: {current_user.nome}", "HTTP")
        ids = DreConfigService(session_db).ExcluirConta(conta_id)
        session_db.commit()
        return jsonify({"success": True, "msg": "Conta excluída com sucesso!", "excluidas": ids}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API ExcluirConta", "ERROR", e)
        return jsonify({"error": "Erro ao excluir conta"}), 500
    finally:
        session_db.close()


@dre_config_bp.route('/api/contas/<conta_id>/mover', methods=['POST'])
@RequiresPermission(PERMISSAO)
def MoverConta(conta_id):
    """Body: {direcao: 'up'|'down', empresa_id}."""
    session_db = ObterSessao()
    try:
        dados = request.get_json(silent=True) or {}
        trocas = DreConfigService(session_db).MoverConta(
            conta_id, dados.get('direcao'), dados.get('empresa_id')
        )
        session_db.commit()
        return jsonify({"success": True, "trocas": trocas}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API MoverConta", "ERROR", e)
        return jsonify({"error": "Erro ao atualizar ordem das contas"}), 500
    finally:
        session_db.close()


@dre_config_bp.route('/api/contas/<conta_id>/status', methods=['POST'])
@RequiresPermission(PERMISSAO)
def AlternarStatusConta(conta_id):
    session_db = ObterSessao()
    try:
        ativo = DreConfigService(session_db).AlternarStatusConta(conta_id)
        session_db.commit()
        return jsonify({"success": True, "is_active": ativo}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API AlternarStatusConta", "ERROR", e)
        return jsonify({"error": "Erro ao atualizar status da conta"}), 500
    finally:
        session_db.close()


# ============================================================
# EMPRESAS DA CONTA
# ============================================================

@dre_config_bp.route('/api/contas/<conta_id>/empresas', methods=['GET'])
@RequiresPermission(PERMISSAO)
def ListarEmpresasDaConta(conta_id):
    session_db = ObterSessao()
    try:
        return jsonify(DreConfigService(session_db).ListarEmpresasDaConta(conta_id)), 200
    except Exception as e:
        RegistrarLog("Erro API ListarEmpresasDaConta", "ERROR", e)
        return jsonify({"error": "Erro ao carregar empresas"}), 500
    finally:
        session_db.close()


@dre_config_bp.route('/api/contas/<conta_id>/empresas/<empresa_id>', methods=['POST'])
@RequiresPermission(PERMISSAO)
def AlternarEmpresaConta(conta_id, empresa_id):
    """Liga/desliga a conta para a empresa na hora (fora do salvar do modal)."""
    session_db = ObterSessao()
    try:
        vinculada = DreConfigService(session_db).AlternarEmpresaConta(conta_id, empresa_id)
        session_db.commit()
        return jsonify({"success": True, "vinculada": vinculada}), 200
    except ValueError as e:
        session_db.rollback()
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        session_db.rollback()
        RegistrarLog("Erro API AlternarEmpresaConta", "ERROR", e)
        return jsonify({"error": "Erro ao atualizar empresas da conta"}), 500
    finally:
        session_db.close()
