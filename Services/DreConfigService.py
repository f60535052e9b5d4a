from sqlalchemy import func, select

from Models.POSTGRESS.Cadastros import Empresa, Categoria, Indicador
from Models.POSTGRESS.DreEstrutura import DreConfigConta, DreConfigContaEmpresa, TIPOS_CONTA, SINAIS_CONTA
from Models.POSTGRESS.DreModelo import ContaDreComponente, EmpresaComponenteDre
from Utils.Arvore import (
    MontarArvore,
    AchatarArvoreVisivel,
    ColetarDescendentes,
    CalcularTrocaOrdem,
    EhDescendente,
)
from Utils.Logger import RegistrarLog

TIPOS_FORMULARIO = ('category', 'calculated', 'total', 'flex')
FILTROS_TIPO = ('all',) + TIPOS_CONTA


# ============================================================
# FORMULÁRIO DA CONTA (funções puras)
# ============================================================

def ValidarFormularioConta(dados):
    """
    Valida o formulário da conta.
    Retorna a lista de problemas (vazia = pode salvar).
    """
    problemas = []
    tipo = dados.get('tipo_formulario', 'category')

    if not (dados.get('name') or '').strip():
        problemas.append("Informe o nome da conta.")

    if tipo not in TIPOS_FORMULARIO:
        problemas.append("Tipo de conta inválido.")
    elif tipo == 'category':
        if dados.get('tipo_categoria', 'revenue') not in ('revenue', 'expense'):
            problemas.append("Tipo de categoria inválido.")
        if not dados.get('category_ids'):
            problemas.append("Selecione ao menos uma categoria.")
    elif tipo == 'calculated':
        if not dados.get('indicator_id'):
            problemas.append("Selecione um indicador.")
    elif tipo == 'total':
        if not dados.get('selected_accounts'):
            problemas.append("Selecione ao menos uma conta para totalizar.")
    elif tipo == 'flex':
        if dados.get('sign', 'positive') not in SINAIS_CONTA:
            problemas.append("Sinal inválido.")

    return problemas


def MontarDadosConta(dados):
    """
    Converte o formulário nos campos da tabela.
    Só a referência do tipo escolhido é mantida; as demais vão nulas.
    """
    tipo = dados.get('tipo_formulario', 'category')
    return {
        "name": dados['name'].strip(),
        "code": dados.get('code') or None,
        "type": dados.get('tipo_categoria', 'revenue') if tipo == 'category' else tipo,
        "category_ids": list(dados.get('category_ids') or []) if tipo == 'category' else None,
        "indicator_id": dados.get('indicator_id') if tipo == 'calculated' else None,
        "selected_accounts": list(dados.get('selected_accounts') or []) if tipo == 'total' else None,
        "sign": (dados.get('sign') or 'positive') if tipo == 'flex' else None,
        "parent_account_id": dados.get('parent_account_id') or None,
    }


def TipoFormularioDaConta(conta):
    """Caminho inverso: tipo armazenado -> tipo do formulário (para edição)."""
    if conta['type'] in ('revenue', 'expense'):
        return 'category'
    return conta['type']


def FiltrarCategoriasFormulario(categorias, tipo_categoria, busca=''):
    busca = (busca or '').lower()
    return [
        c for c in categorias
        if c['type'] == tipo_categoria and busca in c['name'].lower()
    ]


def FiltrarIndicadoresFormulario(indicadores, busca=''):
    busca = (busca or '').lower()
    return [i for i in indicadores if busca in i['name'].lower()]


def ContasTotalizaveis(contas):
    """Contas que podem compor um totalizador (não são total/flex)."""
    return [c for c in contas if c['type'] not in ('total', 'flex')]


def ContasPai(contas):
    """Contas que podem ser pai (totalizadores e flexíveis)."""
    return [c for c in contas if c['type'] in ('total', 'flex')]


# ============================================================
# SERVIÇO
# ============================================================

class DreConfigService:
    """
    Serviço da tela de Estrutura de Contas da DRE (árvore por empresa)
    e do modal de edição de conta.
    Não faz commit: a rota decide o fim da transação.
    """

    def __init__(self, session):
        self.session = session

    # --- CADASTROS AUXILIARES ---

    def ListarEmpresas(self):
        empresas = self.session.query(Empresa).filter(Empresa.is_active.is_(True)).order_by(Empresa.trading_name).all()
        return [e.ParaDict() for e in empresas]

    def ListarCategorias(self):
        return [c.ParaDict() for c in self.session.query(Categoria).order_by(Categoria.code).all()]

    def ListarIndicadores(self):
        return [i.ParaDict() for i in self.session.query(Indicador).order_by(Indicador.code).all()]

    # --- LEITURA DA ÁRVORE ---

    def ListarContas(self, empresa_id=None):
        """
        Contas vinculadas à empresa (inner join no vínculo), por ordem.
        Sem empresa, lista todas as contas que possuem algum vínculo.
        """
        vinculos = select(DreConfigContaEmpresa.account_id)
        if empresa_id:
            vinculos = vinculos.where(DreConfigContaEmpresa.company_id == empresa_id)

        contas = self.session.query(DreConfigConta).filter(
            DreConfigConta.id.in_(vinculos)
        ).order_by(DreConfigConta.display_order).all()
        return [c.ParaDict() for c in contas]

    def ObterArvore(self, empresa_id=None, expandidos=None, tipo='all'):
        """Monta a árvore da empresa e as linhas visíveis conforme a expansão."""
        if tipo not in FILTROS_TIPO:
            raise ValueError("Filtro de tipo inválido.")
        contas = self.ListarContas(empresa_id)
        raizes = MontarArvore(contas)
        return {
            "contas": contas,
            "linhas": AchatarArvoreVisivel(raizes, set(expandidos or []), tipo),
            "contas_pai": ContasPai(contas),
            "contas_totalizaveis": ContasTotalizaveis(contas),
        }

    def _TodasContas(self):
        return [c.ParaDict() for c in self.session.query(DreConfigConta).all()]

    def _ObterConta(self, conta_id):
        conta = self.session.get(DreConfigConta, conta_id)
        if not conta:
            raise ValueError("Conta não encontrada.")
        return conta

    def ObterConta(self, conta_id):
        """Conta no formato do modal: tipo do formulário e empresas vinculadas."""
        conta = self._ObterConta(conta_id).ParaDict()
        conta['tipo_formulario'] = TipoFormularioDaConta(conta)
        conta['empresas'] = self.ListarEmpresasDaConta(conta_id)
        return conta

    # --- ESCRITA ---

    def SalvarConta(self, dados, empresa_id, conta_id=None):
        """
        Insere ou atualiza a conta.
        Na inserção também cria o vínculo com a empresa na MESMA transação.
        """
        if not empresa_id:
            raise ValueError("Selecione uma empresa antes de criar ou editar uma conta")

        problemas = ValidarFormularioConta(dados)
        if problemas:
            raise ValueError(" ".join(problemas))

        campos = MontarDadosConta(dados)
        pai_id = campos['parent_account_id']

        if conta_id:
            conta = self._ObterConta(conta_id)
            if pai_id and (pai_id == conta_id or EhDescendente(self._TodasContas(), pai_id, conta_id)):
                raise ValueError("Uma conta não pode ser filha dela mesma ou de uma descendente.")
            for campo, valor in campos.items():
                setattr(conta, campo, valor)
            RegistrarLog(f"Conta '{conta.name}' atualizada.", "CONFIG")
        else:
            qtd_contas = self.session.query(func.count(DreConfigContaEmpresa.id)).filter(
                DreConfigContaEmpresa.company_id == empresa_id
            ).scalar() or 0

            conta = DreConfigConta(display_order=qtd_contas, is_active=True, **campos)
            self.session.add(conta)
            self.session.flush()

            self.session.add(DreConfigContaEmpresa(account_id=conta.id, company_id=empresa_id, is_active=True))
            RegistrarLog(f"Conta '{conta.name}' criada para a empresa {empresa_id}.", "CONFIG")

        nome_exibicao = (dados.get('nome_exibicao') or '').strip()
        if nome_exibicao:
            self._GravarNomeExibicao(conta, nome_exibicao)

        self.session.flush()
        return conta.ParaDict()

    def _GravarNomeExibicao(self, conta, nome_exibicao):
        """
        Grava o nome personalizado nos componentes da conta
        (um por categoria/indicador referenciado), criando os que faltam.
        """
        referencias = []
        if conta.category_ids:
            referencias = [('categoria', cid) for cid in conta.category_ids]
        elif conta.indicator_id:
            referencias = [('indicador', conta.indicator_id)]

        for ordem, (ref_tipo, ref_id) in enumerate(referencias):
            componente = self.session.query(ContaDreComponente).filter_by(
                conta_dre_modelo_id=conta.id, referencia_tipo=ref_tipo, referencia_id=ref_id
            ).first()
            if componente:
                componente.nome_exibicao = nome_exibicao
            else:
                self.session.add(ContaDreComponente(
                    conta_dre_modelo_id=conta.id,
                    referencia_tipo=ref_tipo,
                    referencia_id=ref_id,
                    peso=1,
                    ordem=ordem,
                    nome_exibicao=nome_exibicao,
                ))

    def ExcluirConta(self, conta_id):
        """Exclui a conta e TODAS as descendentes (cascata calculada aqui)."""
        self._ObterConta(conta_id)
        ids = [conta_id] + ColetarDescendentes(self._TodasContas(), conta_id)

        self.session.query(DreConfigContaEmpresa).filter(
            DreConfigContaEmpresa.account_id.in_(ids)
        ).delete(synchronize_session=False)

        componentes = select(ContaDreComponente.id).where(ContaDreComponente.conta_dre_modelo_id.in_(ids))
        self.session.query(EmpresaComponenteDre).filter(
            EmpresaComponenteDre.componente_id.in_(componentes)
        ).delete(synchronize_session=False)
        self.session.query(ContaDreComponente).filter(
            ContaDreComponente.conta_dre_modelo_id.in_(ids)
        ).delete(synchronize_session=False)
        self.session.query(DreConfigConta).filter(
            DreConfigConta.id.in_(ids)
        ).delete(synchronize_session=False)

        RegistrarLog(f"Conta {conta_id} excluída com {len(ids) - 1} descendente(s).", "CONFIG")
        return ids

    def MoverConta(self, conta_id, direcao, empresa_id=None):
        """
        Troca a ordem com o irmão anterior/seguinte. Nas pontas não faz nada.
        Os irmãos considerados são os visíveis na empresa selecionada.
        """
        self._ObterConta(conta_id)
        contas = self.ListarContas(empresa_id) if empresa_id else self._TodasContas()
        trocas = CalcularTrocaOrdem(contas, conta_id, direcao)
        for cid, nova_ordem in trocas.items():
            self.session.get(DreConfigConta, cid).display_order = nova_ordem
        self.session.flush()
        return trocas

    def AlternarStatusConta(self, conta_id):
        conta = self._ObterConta(conta_id)
        conta.is_active = not conta.is_active
        self.session.flush()
        return conta.is_active

    # --- EMPRESAS DA CONTA (ação imediata, fora do salvar) ---

    def ListarEmpresasDaConta(self, conta_id):
        vinculos = self.session.query(DreConfigContaEmpresa.company_id).filter(
            DreConfigContaEmpresa.account_id == conta_id,
            DreConfigContaEmpresa.is_active.is_(True)
        ).all()
        return [v.company_id for v in vinculos]

    def AlternarEmpresaConta(self, conta_id, empresa_id):
        """Remove o vínculo se existir, senão cria. Retorna True se ficou vinculada."""
        self._ObterConta(conta_id)
        vinculo = self.session.query(DreConfigContaEmpresa).filter_by(
            account_id=conta_id, company_id=empresa_id
        ).first()

        if vinculo:
            self.session.delete(vinculo)
            self.session.flush()
            return False

        self.session.add(DreConfigContaEmpresa(account_id=conta_id, company_id=empresa_id, is_active=True))
        self.session.flush()
        return True
