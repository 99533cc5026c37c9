import logging

import pandas as pd
import streamlit as st

from Procuracao_Functions.ai_assistant import GroqAnalyzer, GroqTextCorrector
from Procuracao_Functions.config import HISTORY_FILE, configure_logging
from Procuracao_Functions.errors import ParseError, RenderError, ValidationWarning
from Procuracao_Functions.history import HistoryLedger, JsonHistoryStore
from Procuracao_Functions.procuracao_record import PROCURADOR_INDEXES, default_form_record
from Procuracao_Functions.session import ProcuracaoSession
from Procuracao_Functions.validator import override_prompt

configure_logging()
logger = logging.getLogger(__name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

GENERATE_ACTIONS = [
    ("docx", "Gerar DOCX"),
    ("docx_abnt", "Gerar DOCX (ABNT)"),
    ("pdf", "Gerar PDF"),
]

st.set_page_config(
    page_title="Gerador de Procurações",
    page_icon="P",
    layout="wide"
)


# ==================== SESSION STATE ====================
def get_session() -> ProcuracaoSession:
    if "procuracao_session" not in st.session_state:
        st.session_state.procuracao_session = ProcuracaoSession(
            history=HistoryLedger(JsonHistoryStore(HISTORY_FILE)),
            corrector=GroqTextCorrector(),
            analyzer=GroqAnalyzer(),
        )
        st.session_state.uploader_nonce = 0
        st.session_state.generated = {}
        st.session_state.error = ""
    return st.session_state.procuracao_session


def correct_selected(session: ProcuracaoSession):
    if session.corrector is not None and session.corrector.enabled:
        with st.spinner("Revisando os dados com IA..."):
            session.run_correction()


def select_record(session: ProcuracaoSession, index: int):
    session.select_index(index)
    st.session_state.generated = {}
    correct_selected(session)


# ==================== INPUT ====================
def show_upload_tab(session: ProcuracaoSession):
    uploaded = st.file_uploader("Planilha de solicitações (.xlsx)", type=["xlsx"],
                                key=f"xlsx_upload_{st.session_state.uploader_nonce}")
    upload_key = (uploaded.name, uploaded.size) if uploaded is not None else None
    if not session.accept_upload(upload_key):
        return

    st.session_state.generated = {}
    if uploaded.type and uploaded.type != XLSX_MIME:
        st.session_state.error = "Formato de arquivo inválido. Por favor, envie um arquivo .xlsx."
        return

    with st.spinner("Processando planilha..."):
        try:
            session.load_spreadsheet(uploaded, name=uploaded.name)
            st.session_state.error = ""
        except ParseError as e:
            st.session_state.error = e.message
            return
    correct_selected(session)


def show_form_tab(session: ProcuracaoSession):
    defaults = default_form_record().to_dict()
    with st.form("procuracao_form", clear_on_submit=False):
        st.subheader("Dados Gerais")
        col1, col2 = st.columns(2)
        values = {}
        general = [
            ("data_solicitacao", "Data da Solicitação"),
            ("obra", "Obra"),
            ("instituicao_financeira", "Instituição Financeira"),
            ("agencia", "Agência"),
            ("operacao", "Operação"),
            ("conta_corrente", "Conta Corrente"),
            ("cidade_emissao", "Cidade de Emissão"),
        ]
        for i, (key, label) in enumerate(general):
            with (col1 if i % 2 == 0 else col2):
                values[key] = st.text_input(f"{label} *", value=str(defaults.get(key, "")))

        for n in PROCURADOR_INDEXES:
            st.subheader(f"Procurador {n}")
            col1, col2 = st.columns(2)
            fields = [
                ("nome", "Nome Completo"),
                ("email", "E-mail"),
                ("nacionalidade", "Nacionalidade"),
                ("estado_civil", "Estado Civil"),
                ("profissao", "Profissão"),
                ("cpf", "CPF"),
                ("rg", "RG"),
                ("endereco", "Endereço Completo"),
            ]
            for i, (attr, label) in enumerate(fields):
                key = f"procurador{n}_{attr}"
                with (col1 if i % 2 == 0 else col2):
                    values[key] = st.text_input(label, value=str(defaults.get(key, "")), key=f"form_{key}")

        submit = st.form_submit_button("Usar estes dados", type="primary", use_container_width=True)

    if submit:
        session.load_form(values)
        # a fresh uploader widget, so the same workbook can be uploaded again
        st.session_state.uploader_nonce += 1
        st.session_state.generated = {}
        st.session_state.error = ""
        correct_selected(session)


# ==================== OUTPUT ====================
def show_record_list(session: ProcuracaoSession):
    if not session.parsed_records:
        return
    st.markdown(f"**{len(session.parsed_records)} Documento(s) Encontrado(s) na Planilha**")
    labels = [
        f"{i + 1}. {r.get('obra', 'Obra não informada')} - {r.get('procurador1_nome', 'Procurador não informado')}"
        for i, r in enumerate(session.parsed_records)
    ]
    current = session.selected_index if session.selected_index is not None else 0
    choice = st.radio("Selecione a solicitação", range(len(labels)), index=current,
                      format_func=lambda i: labels[i])
    if choice != current:
        select_record(session, choice)
        st.rerun()


def show_data_preview(session: ProcuracaoSession):
    record = session.selected
    st.subheader("Dados da Procuração")
    if session.corrected_record is not None:
        st.caption("Dados revisados automaticamente pela IA.")
    st.dataframe(pd.DataFrame(record.display_items(), columns=["Campo", "Valor"]),
                 use_container_width=True, hide_index=True)

    if st.button("Analisar com IA"):
        with st.spinner("Analisando..."):
            session.run_analysis()
    if session.ai_analysis:
        st.info(session.ai_analysis)

    st.subheader("Pré-visualização")
    st.text_area("Texto da procuração", session.preview_text(), height=320, disabled=True)


def show_actions(session: ProcuracaoSession):
    st.subheader("Gerar Documento")
    status = session.validation()
    confirm = False
    if status.valid:
        st.success(status.message)
    else:
        st.warning(override_prompt(status))
        confirm = st.checkbox("Sim, gerar o documento mesmo assim")

    cols = st.columns(len(GENERATE_ACTIONS) + 1)
    for col, (kind, label) in zip(cols, GENERATE_ACTIONS):
        with col:
            if st.button(label, use_container_width=True, key=f"gen_{kind}"):
                try:
                    st.session_state.generated[kind] = session.generate(kind, confirm_override=confirm)
                except ValidationWarning as e:
                    st.error(f"Atenção: {e.message} Confirme para gerar mesmo assim.")
                except RenderError as e:
                    st.error(e.message)
            document = st.session_state.generated.get(kind)
            if document is not None:
                st.download_button(
                    label=f"Baixar {document.filename}",
                    data=document.content,
                    file_name=document.filename,
                    mime=document.mime_type,
                    use_container_width=True,
                    key=f"dl_{kind}",
                )
    with cols[-1]:
        st.link_button("Enviar por E-mail", session.mailto_link(), use_container_width=True)


def show_history(session: ProcuracaoSession):
    st.subheader("Histórico")
    items = session.history.items
    if not items:
        st.caption("Nenhum documento gerado ainda.")
        return
    st.dataframe(
        pd.DataFrame(
            [{"Data": item.timestamp, "Arquivo": item.file_name, "Obra": item.data.get("obra", "")} for item in items]
        ),
        use_container_width=True,
        hide_index=True,
    )


# ==================== PAGE ====================
session = get_session()
st.title("Gerador de Procurações")

main_col, history_col = st.columns([3, 1])
with main_col:
    upload_tab, form_tab = st.tabs(["Enviar Arquivo", "Preencher Formulário"])
    with upload_tab:
        show_upload_tab(session)
        show_record_list(session)
    with form_tab:
        show_form_tab(session)

    if st.session_state.error:
        st.error(st.session_state.error)

    if session.selected is not None:
        show_data_preview(session)
        show_actions(session)

with history_col:
    show_history(session)
