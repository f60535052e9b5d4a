import io
from collections import defaultdict
from datetime import datetime

import pandas as pd

from Models.POSTGRESS.Cadastros import Empresa, Categoria, DadosBrutos
from Models.POSTGRESS.DreModelo import ContaDreModelo
from Reports.DreAgregacao import (
    ABREVIACOES_MESES,
    GerarJanelaDozeMeses,
    MontarTabelaDre,
    NormalizarMes,
    ChavePeriodo,
    CorValor,
    FormatarMoeda,
)
from Utils.Logger import RegistrarLog


class DreVisualizacaoService:
    """
    Serviço da tela de visualização do DRE por período.
    Recebe a sessão e o usuário logado (define o escopo de empresas).
    """

    def __init__(self, session, usuario):
        self.session = session
        self.usuario = usuario

    # ============================================================
    # ESCOPO DE EMPRESAS
    # ============================================================

    def ObterEmpresasPermitidas(self):
        query = self.session.query(Empresa).filter(Empresa.is_active.is_(True))
        if not self.usuario.has_all_companies_access:
            if not self.usuario.company_id:
                return []
            query = query.filter(Empresa.id == self.usuario.company_id)
        return [e.ParaDict() for e in query.order_by(Empresa.trading_name).all()]

    def ResolverEmpresa(self, empresa_id):
        """Usuário sem acesso geral sempre vê apenas a própria empresa."""
        if not self.usuario.has_all_companies_access:
            empresa_id = self.usuario.company_id
        if not empresa_id:
            raise ValueError("Selecione uma empresa.")
        return empresa_id

    @staticmethod
    def AnosDisponiveis(ano):
        return [ano - 2 + i for i in range(5)]

    # ============================================================
    # DADOS
    # ============================================================

    def _BuscarDadosPeriodos(self, empresa_id, periodos):
        """
        Busca os dados brutos da janela numa única consulta
        e devolve [(mes, ano, linhas)] na ordem da janela.
        """
        rows = self.session.query(
            DadosBrutos.mes, DadosBrutos.ano, DadosBrutos.valor, Categoria.type.label('categoria_tipo')
        ).outerjoin(
            Categoria, Categoria.id == DadosBrutos.categoria_id
        ).filter(
            DadosBrutos.empresa_id == empresa_id,
            DadosBrutos.ano.in_(sorted({a for _, a in periodos})),
            DadosBrutos.mes.in_(sorted({m for m, _ in periodos}))
        ).all()

        janela = set(periodos)
        por_periodo = defaultdict(list)
        for r in rows:
            if (r.mes, r.ano) not in janela:
                continue
            por_periodo[(r.mes, r.ano)].append({"valor": r.valor, "categoria_tipo": r.categoria_tipo})

        return [(mes, ano, por_periodo.get((mes, ano), [])) for mes, ano in periodos]

    def GerarDre(self, empresa_id, mes, ano):
        """
        Calcula o DRE dos 12 meses terminando em (mes, ano).
        Retorna colunas da janela e linhas com valor, cor e formatação.
        """
        empresa_id = self.ResolverEmpresa(empresa_id)
        mes = NormalizarMes(mes)
        try:
            ano = int(ano)
        except (TypeError, ValueError):
            raise ValueError("Ano inválido.")

        periodos = GerarJanelaDozeMeses(mes, ano)
        contas = [
            c.ParaDict() for c in
            self.session.query(ContaDreModelo).filter(ContaDreModelo.visivel.is_(True)).order_by(ContaDreModelo.ordem_padrao).all()
        ]
        dados = self._BuscarDadosPeriodos(empresa_id, periodos)
        tabela = MontarTabelaDre(contas, dados)

        for linha in tabela:
            linha['cores_mensais'] = {k: CorValor(v, linha['simbolo']) for k, v in linha['valores_mensais'].items()}
            linha['cor_total'] = CorValor(linha['total'], linha['simbolo'])
            linha['total_formatado'] = FormatarMoeda(linha['total'])

        RegistrarLog(f"DRE gerado para empresa {empresa_id} ({mes}/{ano}).", "DRE")
        return {
            "empresa_id": empresa_id,
            "mes": mes,
            "ano": ano,
            "colunas": [
                {"chave": ChavePeriodo(m, a), "rotulo": f"{ABREVIACOES_MESES[m]}/{str(a)[-2:]}"}
                for m, a in periodos
            ],
            "linhas": tabela,
        }

    def GerarExcelDre(self, empresa_id, mes, ano):
        """Gera o binário do Excel do DRE (uma coluna por mês + acumulado)."""
        dre = self.GerarDre(empresa_id, mes, ano)
        if not dre['linhas']:
            return None

        registros = []
        for linha in dre['linhas']:
            registro = {"Conta": f"({linha['simbolo']}) {linha['nome']}"}
            for col in dre['colunas']:
                registro[col['rotulo']] = linha['valores_mensais'][col['chave']]
            registro["Acumulado"] = linha['total']
            registros.append(registro)

        df = pd.DataFrame(registros)

        output = io.BytesIO()
        with pd.ExcelWriter(output, engine='xlsxwriter') as writer:
            df.to_excel(writer, index=False, sheet_name='DRE')
            workbook = writer.book
            worksheet = writer.sheets['DRE']
            formato_moeda = workbook.add_format({'num_format': 'R$ #,##0.00;[Red]-R$ #,##0.00'})
            worksheet.set_column(0, 0, max(df['Conta'].astype(str).map(len).max(), 5) + 2)
            worksheet.set_column(1, len(df.columns) - 1, 16, formato_moeda)

        output.seek(0)
        return output

    @staticmethod
    def NomeArquivoExcel(mes, ano):
        return f"DRE_{NormalizarMes(mes)}_{ano}_{datetime.now().strftime('%Y%m%d_%H%M')}.xlsx"
