"""UI strings for the two supported locales."""

from __future__ import annotations

LANGUAGES = ("en", "pt")
DEFAULT_LANGUAGE = "pt"

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        "appTitle": "ColectorPro",
        "searchPlaceholder": "Search Name...",
        "brandPlaceholder": "Filter by Brand...",
        "modelPlaceholder": "Filter by Model...",
        "categoryAll": "All Categories",
        "addCar": "Add Car",
        "noCarsTitle": "No cars found",
        "noCarsSubtitle": "Get started by adding a new car to your collection.",
        "noCarsFilter": "Try adjusting your filters.",
        "deleteConfirm": "Are you sure you want to delete this car?",
        "loading": "Loading...",
        # server config
        "serverConfigTitle": "Server Connection",
        "storageMode": "Storage Mode",
        "modeLocal": "Local (Offline / This Device)",
        "modeServer": "Remote Server (Centralized)",
        "serverUrl": "Server URL",
        "serverUrlPlaceholder": "e.g., http://192.168.1.5:3001",
        "apiKey": "Gemini API Key",
        "apiKeyPlaceholder": "Leave empty to keep the current key",
        "apiKeyClear": "Remove stored key",
        "saveConfig": "Save Configuration",
        "connectionError": "Could not connect to server.",
        "switchToLocal": "Switch to Local Mode",
        "dismiss": "Dismiss",
        # view
        "viewGrid": "Grid",
        "viewScroll": "Scroll",
        # form
        "formTitle": "Add New Car",
        "formTitleEdit": "Edit Car",
        "uploadText": "Click to upload photos",
        "addMorePhotos": "Add Photos",
        "removePhoto": "Remove Photo",
        "mainPhoto": "Main Cover",
        "changeImage": "Change Image",
        "aiEditorTitle": "AI Image Editor",
        "aiEditorDesc": "Power-up the selected photo with Gemini!",
        "aiPlaceholder": "e.g., Add blue neon lights...",
        "generate": "Generate",
        "nameLabel": "Name / Nickname",
        "brandLabel": "Brand",
        "modelLabel": "Model",
        "categoryLabel": "Category",
        "cancel": "Cancel",
        "save": "Save to Garage",
        "update": "Update Car",
        "errorFile": "File size too large (max 5MB)",
        "errorRead": "Could not read one of the selected files",
        "errorReq": "Please provide a name and at least one image.",
        "errorGen": "Failed to generate image. Please try again.",
        # details
        "detailsTitle": "Car Details",
        "edit": "Edit",
        "delete": "Delete",
        "close": "Close",
        # card
        "added": "Added",
    },
    "pt": {
        "appTitle": "ColectorPro",
        "searchPlaceholder": "Buscar Nome...",
        "brandPlaceholder": "Filtrar por Marca...",
        "modelPlaceholder": "Filtrar por Modelo...",
        "categoryAll": "Todas Categorias",
        "addCar": "Adicionar Carro",
        "noCarsTitle": "Nenhum carro encontrado",
        "noCarsSubtitle": "Comece adicionando um novo carro à sua garagem.",
        "noCarsFilter": "Tente ajustar seus filtros.",
        "deleteConfirm": "Tem certeza que deseja excluir este carro?",
        "loading": "Carregando...",
        # server config
        "serverConfigTitle": "Conexão com Servidor",
        "storageMode": "Modo de Armazenamento",
        "modeLocal": "Local (Offline / Este Dispositivo)",
        "modeServer": "Servidor Remoto (Centralizado)",
        "serverUrl": "URL do Servidor",
        "serverUrlPlaceholder": "ex: http://192.168.0.15:3001",
        "apiKey": "Chave da API Gemini",
        "apiKeyPlaceholder": "Deixe vazio para manter a chave atual",
        "apiKeyClear": "Remover chave salva",
        "saveConfig": "Salvar Configuração",
        "connectionError": "Não foi possível conectar ao servidor. Verifique se o servidor está rodando.",
        "switchToLocal": "Mudar para Local",
        "dismiss": "Fechar",
        # view
        "viewGrid": "Grade",
        "viewScroll": "Rolagem",
        # form
        "formTitle": "Adicionar Novo Carro",
        "formTitleEdit": "Editar Carro",
        "uploadText": "Clique para enviar fotos",
        "addMorePhotos": "Add Fotos",
        "removePhoto": "Remover Foto",
        "mainPhoto": "Capa Principal",
        "changeImage": "Alterar Imagem",
        "aiEditorTitle": "Editor de Imagem IA",
        "aiEditorDesc": "Turbine a foto selecionada com Gemini!",
        "aiPlaceholder": "ex: Adicionar luzes neon azuis...",
        "generate": "Gerar",
        "nameLabel": "Nome / Apelido",
        "brandLabel": "Marca",
        "modelLabel": "Modelo",
        "categoryLabel": "Categoria",
        "cancel": "Cancelar",
        "save": "Salvar na Garagem",
        "update": "Atualizar Carro",
        "errorFile": "Arquivo muito grande (max 5MB)",
        "errorRead": "Não foi possível ler um dos arquivos selecionados",
        "errorReq": "Por favor forneça nome e pelo menos uma imagem.",
        "errorGen": "Falha ao gerar imagem. Tente novamente.",
        # details
        "detailsTitle": "Detalhes do Carro",
        "edit": "Editar",
        "delete": "Excluir",
        "close": "Fechar",
        # card
        "added": "Add",
    },
}


def translate(language: str, key: str) -> str:
    """Return the string for key, falling back to English and then the key."""
    table = TRANSLATIONS.get(language) or TRANSLATIONS["en"]
    if key in table:
        return table[key]
    return TRANSLATIONS["en"].get(key, key)
